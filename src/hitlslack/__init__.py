"""hitlslack: 슬랙으로 사람에게 질문하고 답을 기다리는 MCP 서버"""

__version__ = "0.1.0"
