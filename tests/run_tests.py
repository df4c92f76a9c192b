"""
Run the RideMatch unit tests without pytest.

    python tests/run_tests.py [-q] [pattern]
"""

import os
import sys
import unittest

TESTS_DIR = os.path.dirname(os.path.abspath(__file__))

# Root for the ridematch package and config, tests dir for sample_problems
sys.path.insert(0, os.path.dirname(TESTS_DIR))
sys.path.insert(0, TESTS_DIR)


def _last_line(traceback: str) -> str:
    return traceback.strip().splitlines()[-1]


def print_summary(result: unittest.TestResult):
    problems = [('FAIL', t, tb) for t, tb in result.failures]
    problems += [('ERROR', t, tb) for t, tb in result.errors]
    passed = result.testsRun - len(problems)

    print(f"\n{passed}/{result.testsRun} passed, {len(result.skipped)} skipped")
    for kind, test, traceback in problems:
        print(f"  {kind} {test.id()}: {_last_line(traceback)}")


def run_tests(pattern: str = 'test_*.py', verbosity: int = 2) -> bool:
    """Discover test modules under tests/ and run them."""
    suite = unittest.TestLoader().discover(TESTS_DIR, pattern=pattern)
    result = unittest.TextTestRunner(verbosity=verbosity).run(suite)
    print_summary(result)
    return result.wasSuccessful()


if __name__ == '__main__':
    args = sys.argv[1:]
    verbosity = 1 if '-q' in args else 2
    patterns = [a for a in args if a != '-q']
    sys.exit(0 if run_tests(patterns[0] if patterns else 'test_*.py', verbosity) else 1)
