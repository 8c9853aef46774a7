"""
houndbatch 진입점

사용법:
    python main.py -p <password> -x report.xlsx
    python main.py --list
"""

import sys
import os

# Windows 인코딩 설정 (cp949 -> UTF-8)
if sys.platform == "win32":
    os.environ["PYTHONUTF8"] = "1"

from houndbatch.cli import main

if __name__ == "__main__":
    sys.exit(main())
