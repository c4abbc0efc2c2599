"""MCP 서버 실행 진입점"""

import sys

from hitlslack.main import main

if __name__ == "__main__":
    sys.exit(main())
