"""
CLI 진입점

실행 방법:
    python -m cli pay alice 1000 "lunch"
"""

from cli.bootstrap import run

if __name__ == "__main__":
    run()
