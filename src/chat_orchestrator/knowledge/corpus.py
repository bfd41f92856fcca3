"""Default knowledge corpus loaded when the assistant starts."""

from chat_orchestrator.models import DocumentInput

DEFAULT_CORPUS = [
    DocumentInput(
        id="ai-agent-orchestration",
        title="AI Agent Orchestration Research",
        content=(
            "Multi-agent systems require sophisticated orchestration patterns for optimal "
            "performance. Key patterns include Master-Slave, Peer-to-Peer, and Hierarchical "
            "architectures. Master-Slave provides centralized control while allowing distributed "
            "execution. Peer-to-Peer enables equal collaboration between agents. Hierarchical "
            "structures support complex decision-making processes. Error handling and recovery "
            "mechanisms are crucial for production deployments. Load balancing ensures optimal "
            "resource utilization across agent networks. Communication protocols must be "
            "standardized for interoperability. Monitoring and observability are essential for "
            "system health."
        ),
        tags=["research", "ai-orchestration", "multi-agent systems"],
        metadata={"type": "research", "category": "ai-orchestration"},
    ),
    DocumentInput(
        id="custom-mcp-server",
        title="Custom MCP Server Development",
        content=(
            "Model Context Protocol (MCP) enables AI models to interact with external tools and "
            "data sources. RESTful API design principles are fundamental for MCP server "
            "implementation. Authentication mechanisms must be robust and secure. Error handling "
            "should be comprehensive with proper HTTP status codes. Rate limiting prevents abuse "
            "and ensures fair resource allocation. Testing strategies include unit tests, "
            "integration tests, and load testing. Versioning strategies ensure backward "
            "compatibility. Security best practices include input validation and output "
            "sanitization."
        ),
        tags=["development", "mcp-protocol", "api development"],
        metadata={"type": "development", "category": "mcp-protocol"},
    ),
    DocumentInput(
        id="ai-saas-building",
        title="AI SaaS Building Methodologies",
        content=(
            "Multi-tenancy architecture is essential for scalable SaaS platforms. API-first "
            "design enables integration with various client applications. Event-driven "
            "architecture supports real-time features and scalability. Database design must "
            "support tenant isolation and data security. Billing and subscription management are "
            "critical for business operations. Performance optimization requires caching, CDN, "
            "and database optimization. Compliance with regulations like GDPR and SOC 2 is "
            "mandatory."
        ),
        tags=["business", "saas-development", "multi-tenancy"],
        metadata={"type": "business", "category": "saas-development"},
    ),
    DocumentInput(
        id="enterprise-ai-integration",
        title="Enterprise AI Integration Strategies",
        content=(
            "Legacy system integration requires careful planning and execution. Data governance "
            "frameworks ensure data quality and compliance. Zero-trust architecture provides "
            "comprehensive security. Pilot programs validate AI solutions before full deployment. "
            "Change management processes support organizational adoption. Risk management "
            "identifies and mitigates potential issues. ROI measurement demonstrates business "
            "value and justification."
        ),
        tags=["enterprise", "ai-integration", "change management"],
        metadata={"type": "enterprise", "category": "ai-integration"},
    ),
]
