"""hitlslack MCP 서버 정의"""

from fastmcp import FastMCP

from hitlslack import __version__
from hitlslack.bridge.engine import CorrelationEngine
from hitlslack.mcp.tools.human import ask_human as _ask_human
from hitlslack.mcp.tools.human import reset_thread as _reset_thread

SERVER_INSTRUCTIONS = """
This server enables AI assistants to ask questions to humans via Slack and wait for their responses.

Key features:
- Sends questions to a specific Slack channel
- Mentions a specific user to ensure they see the question
- Creates a thread for the conversation
- Waits for the user's response (with configurable timeout)
- Returns the human's answer back to the AI

Use this tool when you need:
- Information that requires human knowledge or judgment
- Clarification on ambiguous requirements
- Confirmation before taking significant actions
- Personal or context-specific information
- Access to resources or systems the AI cannot directly access

The tool will maintain conversation context within a single thread until reset.
"""


def create_server(engine: CorrelationEngine) -> FastMCP:
    """엔진에 연결된 MCP 서버 생성"""
    mcp = FastMCP("hitlslack", instructions=SERVER_INSTRUCTIONS, version=__version__)

    @mcp.tool()
    async def ask_human(question: str) -> dict:
        """Ask a question to a human via Slack and wait for their response.

        Args:
            question: The question to ask the human
        """
        return await _ask_human(engine, question)

    @mcp.tool()
    def reset_thread() -> dict:
        """Reset the conversation thread to start a new topic."""
        return _reset_thread(engine)

    return mcp
