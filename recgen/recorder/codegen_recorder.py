"""Use Playwright's official codegen to capture a recording for the generator."""
from __future__ import annotations

import argparse
import logging
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .action_extractor import extract_actions

logger = logging.getLogger(__name__)


def codegen_command(url: str, output_file: Path, target: str = "java") -> List[str]:
    return [
        'playwright',
        'codegen',
        '--target', target,
        '--output', str(output_file),
        url,
    ]


def record_with_codegen(url: str, output_file: Path, target: str = "java", timeout: int = 600) -> Optional[Path]:
    """Run Playwright codegen until the browser is closed and return the recording path."""
    output_file.parent.mkdir(parents=True, exist_ok=True)

    print(f"[Codegen] Starting Playwright codegen...")
    print(f"[Codegen] Recording to: {output_file}")
    print(f"[Codegen] Close the browser when done\n")

    try:
        subprocess.run(codegen_command(url, output_file, target), timeout=timeout)
    except subprocess.TimeoutExpired:
        print(f"[Codegen] Timeout reached ({timeout}s)")
    except FileNotFoundError:
        logger.error("playwright executable not found; install it with 'pip install playwright'")
        return None
    except KeyboardInterrupt:
        print("\n[Codegen] Stopped by user")

    if not output_file.exists():
        print("[Codegen] No code generated")
        return None

    actions = extract_actions(output_file.read_text(encoding='utf-8', errors='replace'))
    print(f"\n[Codegen] Captured {len(actions)} actions")
    return output_file


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    parser = argparse.ArgumentParser(description="Record a browser session for test generation")
    parser.add_argument('--url', required=True, help="Page to open in the recorder")
    parser.add_argument('--output', default=None, help="Recording file (default: recordings/<timestamp>.java)")
    parser.add_argument('--target', default='java', choices=['java', 'python'])
    parser.add_argument('--timeout', type=int, default=600)
    args = parser.parse_args(argv)

    suffix = '.java' if args.target == 'java' else '.py'
    output = Path(args.output) if args.output else Path('recordings') / (
        datetime.now().strftime("%Y%m%d_%H%M%S") + suffix)
    result = record_with_codegen(args.url, output, args.target, args.timeout)
    return 0 if result else 1


if __name__ == '__main__':
    sys.exit(main())
