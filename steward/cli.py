#!/usr/bin/env python3
"""steward CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from steward.api import Steward
from steward.lib.config import load_config
from steward.lib.types import QueryType
from steward.lib.validate import ValidationError
from steward.policy.index import DanglingPolicyReference
from steward.regression.detector import InconsistentTestSummary
from steward.scope.matcher import InvalidPattern
from steward.workflow.sprint import SprintClosed
from steward.workflow.state_machine import InvalidTransition
from steward.commands import regress as cmd_regress_module
from steward.commands import scope as cmd_scope_module
from steward.commands import search as cmd_search_module
from steward.commands import sprint as cmd_sprint_module

# Load-time and input errors: report and exit 2, never guess
FATAL_ERRORS = (
    ValidationError,
    DanglingPolicyReference,
    InvalidPattern,
    InconsistentTestSummary,
    FileNotFoundError,
    ValueError,
)


def get_config(args):
    """Load steward.env from --config or the current directory."""
    return load_config(Path(args.config) if args.config else None)


def get_steward(args) -> Steward:
    """Load config and the policy index."""
    return Steward.from_config(get_config(args))


def _query(query_type: QueryType):
    def run(args):
        return cmd_search_module.cmd_query(args, get_steward(args), query_type)
    return run


def cmd_scope(args):
    return cmd_scope_module.cmd_scope(args, get_config(args))


def cmd_impact(args):
    return cmd_scope_module.cmd_impact(args, get_config(args))


def cmd_regress(args):
    return cmd_regress_module.cmd_regress(args, get_config(args))


def cmd_parse_tests(args):
    return cmd_regress_module.cmd_parse_tests(args, get_config(args))


def cmd_sprint_status(args):
    return cmd_sprint_module.cmd_sprint_status(args, get_config(args))


def cmd_sprint_gate(args):
    return cmd_sprint_module.cmd_sprint_gate(args, get_config(args))


def cmd_sprint_transition(args):
    return cmd_sprint_module.cmd_sprint_transition(args, get_config(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='steward', description='Policy, scope, and regression checks')
    parser.add_argument('--config', '-c', help='Directory containing steward.env (default: cwd)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log decisions to stderr')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # steward search / scenario / tech / category
    for name, query_type, help_text in [
        ('search', QueryType.KEYWORD, 'Find policies by keyword'),
        ('scenario', QueryType.SCENARIO, 'Find policies for a scenario'),
        ('tech', QueryType.TECHNOLOGY, 'Find policies for a technology'),
        ('category', QueryType.CATEGORY, 'List policies in a category'),
    ]:
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument('value', help='Search key')
        p.add_argument('--limit', '-n', type=int, help='Show at most N policies')
        p.add_argument('--no-fallback', action='store_true',
                       help='Do not fall back to default categories for unknown keys')
        p.set_defaults(func=_query(query_type))

    # steward scope
    p_scope = subparsers.add_parser('scope', help='Classify paths against the sprint scope')
    p_scope.add_argument('paths', nargs='+', help='File paths the task will modify')
    p_scope.add_argument('--approve', action='append', metavar='PATH',
                         help='Path explicitly approved despite being out of scope (repeatable)')
    p_scope.set_defaults(func=cmd_scope)

    # steward impact
    p_impact = subparsers.add_parser('impact', help='Recommend a strategy for changing shared code')
    p_impact.add_argument('path', help='Shared file')
    p_impact.add_argument('--usage', '-u', type=int, required=True, help='Number of places using it')
    p_impact.add_argument('--breaking', action='store_true', help='The change breaks existing callers')
    p_impact.add_argument('--threshold', type=int, help='Override the high-usage threshold')
    p_impact.set_defaults(func=cmd_impact)

    # steward regress
    p_regress = subparsers.add_parser('regress', help='Compare a test run with the baseline')
    p_regress.add_argument('current', help='Current test summary (JSON/YAML)')
    p_regress.add_argument('--baseline', '-b', help='Baseline summary (default: sprint baseline)')
    p_regress.set_defaults(func=cmd_regress)

    # steward parse-tests
    p_parse = subparsers.add_parser('parse-tests', help='Build a test summary from raw test output')
    p_parse.add_argument('output', help='File containing test runner output')
    p_parse.add_argument('--write', '-w', metavar='FILE', help='Write summary JSON to FILE')
    p_parse.set_defaults(func=cmd_parse_tests)

    # steward sprint
    p_sprint = subparsers.add_parser('sprint', help='Sprint status, gate, and lifecycle')
    p_sprint.set_defaults(func=cmd_sprint_status)
    sprint_sub = p_sprint.add_subparsers(dest='sprint_cmd')

    p_sprint_status = sprint_sub.add_parser('status', help='Show the active sprint')
    p_sprint_status.set_defaults(func=cmd_sprint_status)

    p_sprint_gate = sprint_sub.add_parser('gate', help='Evaluate the completion gate')
    p_sprint_gate.add_argument('--current', help='Current test summary (JSON/YAML)')
    p_sprint_gate.add_argument('--approve', action='append', metavar='PATH',
                               help='Out-of-scope path explicitly approved (repeatable)')
    p_sprint_gate.set_defaults(func=cmd_sprint_gate)

    for action, help_text in [
        ('start', 'Begin work (planned -> in_progress)'),
        ('submit', 'Submit for review; blocks if the gate is not clear'),
        ('resolve', 'Leave blocked after a scope amendment, permission grant, or fix'),
        ('complete', 'Close the sprint (review -> done)'),
    ]:
        p = sprint_sub.add_parser(action, help=help_text)
        p.add_argument('--current', help='Current test summary (submit/complete)')
        p.add_argument('--approve', action='append', metavar='PATH',
                       help='Out-of-scope path explicitly approved (repeatable)')
        p.add_argument('--resolution', '-r', help='How the blocker was resolved (resolve)')
        p.set_defaults(func=cmd_sprint_transition, action=action)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    try:
        return args.func(args)
    except InvalidTransition as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except SprintClosed as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except FATAL_ERRORS as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
