#!/usr/bin/env python3
"""
Coverage runner for Hazard Chess
Runs the test suite under pytest-cov for the rules core, the AI layer and the
text client, optionally writing an HTML report
"""

import argparse
import subprocess
import sys
import webbrowser
from pathlib import Path

COVERED_PACKAGES = ["hazard", "ai", "main"]


def build_command(html: bool, fail_under: int, extra=None):
    cmd = [sys.executable, "-m", "pytest", "tests/"]
    cmd.extend(f"--cov={package}" for package in COVERED_PACKAGES)
    cmd.append("--cov-report=term-missing")
    if html:
        cmd.append("--cov-report=html:htmlcov")
    if fail_under > 0:
        cmd.append(f"--cov-fail-under={fail_under}")
    cmd.extend(extra or [])
    return cmd


def run_coverage(html: bool = False, fail_under: int = 0, open_report: bool = False, extra=None) -> bool:
    """Run the suite with coverage; returns True when pytest exits cleanly"""
    print("🧪 Running Hazard Chess tests with coverage...")
    print("=" * 50)

    try:
        result = subprocess.run(build_command(html, fail_under, extra), check=False)
    except FileNotFoundError:
        print("❌ Error: Python or pytest not found")
        return False

    if result.returncode == 0:
        print("\n✅ All tests passed!")
    else:
        print(f"\n❌ Tests or coverage threshold failed (exit code: {result.returncode})")

    report = Path("htmlcov/index.html")
    if html and report.exists():
        print(f"\n📊 Coverage report: {report.absolute()}")
        if open_report:
            webbrowser.open(f"file://{report.absolute()}")

    return result.returncode == 0


def main():
    parser = argparse.ArgumentParser(description="Run Hazard Chess tests with coverage")
    parser.add_argument('--html', action='store_true', help='Also write an HTML report to htmlcov/')
    parser.add_argument('--open', action='store_true', help='Open the HTML report when done')
    parser.add_argument('--fail-under', type=int, default=0,
                        help='Fail if total coverage is below this percentage')
    args, extra = parser.parse_known_args()
    success = run_coverage(args.html or args.open, args.fail_under, args.open, extra)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
