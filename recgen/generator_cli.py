#!/usr/bin/env python3
"""
Test Artifact Generator CLI

Generates a page object, Cucumber feature and step definitions from a
Playwright recording, or a test requirement from a JIRA story.

Modes (by number of positional arguments):
  4  recording mode: RECORDING_FILE FEATURE_NAME PAGE_URL STORY_ID
  1  JIRA mode:      STORY_ID
  0  self-check:     framework analysis and structure check of "login"
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from recgen.core.errors import GeneratorError
from recgen.core.settings import FrameworkPaths
from recgen.generators.jira_requirements import generate_from_jira_story, render_requirement_feature
from recgen.sources.jira import fetch_jira_story
from recgen.services.framework_service import analyze_framework, validate_test_structure
from recgen.services.generation_service import GenerationReport, GenerationService

USAGE = """\
Usage:
  recgen <recording-file> <feature-name> <page-url> <story-id>   generate from a recording
  recgen <story-id>                                              generate a requirement from JIRA
  recgen                                                         analyze the framework
"""


def _banner(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def print_generation_report(report: GenerationReport) -> None:
    _banner(f"✅ GENERATED {report.class_name}")
    for write in report.writes:
        print(f"  {write.artifact:<16} {write.status:<8} {write.path}")
    if report.artifacts.login_reused:
        print("  Login steps reuse the existing login page object")
    if report.warnings:
        print(f"\n  Warnings ({len(report.warnings)}):")
        for warning in report.warnings:
            print(f"    - {warning}")
    print("=" * 60 + "\n")


def run_recording_mode(paths: FrameworkPaths, recording: str, feature: str, url: str, story: str) -> int:
    service = GenerationService(paths)
    report = service.generate_from_recording(recording, feature, url, story)
    print_generation_report(report)
    return 0


def run_jira_mode(paths: FrameworkPaths, story_id: str, write_draft: bool) -> int:
    requirement = generate_from_jira_story(story_id, fetch=lambda key: fetch_jira_story(key, paths))
    _banner(f"📋 TEST REQUIREMENT FROM {story_id}")
    print(f"  Test Name:  {requirement.test_name}")
    print(f"  Elements:   {len(requirement.elements)}")
    print(f"  Scenarios:  {len(requirement.scenarios)}")
    for scenario in requirement.scenarios:
        print(f"    - {scenario.name}")
    if write_draft:
        target = paths.feature_path(requirement.test_name)
        if target.exists():
            print(f"\n  Draft not written, {target} already exists")
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(render_requirement_feature(requirement), encoding="utf-8")
            print(f"\n  Draft feature: {target}")
    print("=" * 60 + "\n")
    return 0


def run_self_check(paths: FrameworkPaths) -> int:
    info = analyze_framework(paths)
    _banner("⚙️  FRAMEWORK CONFIGURATION")
    for line in info.summary_lines():
        print(f"  {line}")
    structure = validate_test_structure("login", paths)
    print(f"\n  Structure check for 'login': {'VALID' if structure.is_valid else 'INCOMPLETE'}")
    for missing in structure.missing_files:
        print(f"    missing: {missing}")
    print("=" * 60 + "\n")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="recgen",
        description="Generate Playwright/Cucumber test artifacts from recordings or JIRA stories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=USAGE,
    )
    parser.add_argument("inputs", nargs="*", help="0, 1 or 4 positional arguments (see usage)")
    parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Root of the target test framework (default: $FRAMEWORK_ROOT or the current directory)"
    )
    parser.add_argument(
        "--write-draft",
        action="store_true",
        help="In JIRA mode, also write a draft feature file"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose output"
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    paths = FrameworkPaths.resolve(args.project_root)
    try:
        if len(args.inputs) == 4:
            return run_recording_mode(paths, *args.inputs)
        if len(args.inputs) == 1:
            return run_jira_mode(paths, args.inputs[0], args.write_draft)
        if not args.inputs:
            return run_self_check(paths)
    except GeneratorError as exc:
        logger.error("%s", exc)
        return 1
    except RuntimeError as exc:
        logger.error("Generation failed: %s", exc)
        return 1

    print(USAGE)
    return 1


if __name__ == "__main__":
    sys.exit(main())
