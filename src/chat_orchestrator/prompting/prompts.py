SYSTEM_PREAMBLE = """You are an expert AI assistant with access to comprehensive research and knowledge about AI technologies, multi-agent systems, MCP protocols, SaaS development, and enterprise integration.

Based on the context and conversation history, provide a detailed, accurate, and helpful response. When appropriate, reference specific information from the context and provide actionable recommendations."""

DOCUMENT_TEMPLATE = """Document: {title}
Content: {content}
Relevance: {relevance:.1f}%"""

SYSTEM_PROMPT_TEMPLATE = """{preamble}

Context from knowledge base:
{documents}

Previous conversation:
{history}

Current question: {query}"""

NO_DOCUMENTS = "No relevant documents found."

NO_HISTORY = "No previous conversation."
