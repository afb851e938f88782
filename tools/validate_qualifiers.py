#!/usr/bin/env python3
"""
validate_qualifiers.py - Run qualifier descriptor test vectors

Usage:
    python tools/validate_qualifiers.py vectors.yaml
    python tools/validate_qualifiers.py vectors.yaml --verbose
    python tools/validate_qualifiers.py vectors.yaml --json

Vector file format:
    name: core-qualifiers
    test_vectors:
      - name: full sample
        descriptor: en-rUS-ldrtl-sw600dp-v21
        expected:
          language: en
          region: US
          layout_direction: 0x80
      - name: out of order
        descriptor: ldrtl-en
        valid: false

Expected keys are ResTableConfig fields or sub-field views
(layout_direction, ui_mode_type, keys_hidden, ...). A vector with
``valid: false`` passes when the descriptor is rejected. ``wire`` may give
the expected 64-byte record as hex.
"""

import argparse
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

# Add tools to path
sys.path.insert(0, str(Path(__file__).parent))
from qualifier_config import ResTableConfig
from qualifier_parser import DescriptorDecoder, DecodeError


@dataclass
class TestResult:
    """Result of a single test vector."""
    name: str
    passed: bool
    descriptor: str = ""
    description: str = ""
    expected: Dict[str, Any] = field(default_factory=dict)
    actual: Dict[str, Any] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'passed': self.passed,
            'descriptor': self.descriptor,
            'description': self.description,
            'expected': self.expected,
            'actual': self.actual,
            'errors': self.errors,
        }


@dataclass
class ValidationResult:
    """Result of running a vector file."""
    file_valid: bool
    file_errors: List[str] = field(default_factory=list)
    test_results: List[TestResult] = field(default_factory=list)

    @property
    def tests_passed(self) -> int:
        return sum(1 for t in self.test_results if t.passed)

    @property
    def tests_failed(self) -> int:
        return sum(1 for t in self.test_results if not t.passed)

    @property
    def total_tests(self) -> int:
        return len(self.test_results)

    @property
    def all_passed(self) -> bool:
        return self.file_valid and self.tests_failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'file_valid': self.file_valid,
            'file_errors': self.file_errors,
            'tests_passed': self.tests_passed,
            'tests_failed': self.tests_failed,
            'total_tests': self.total_tests,
            'all_passed': self.all_passed,
            'test_results': [t.to_dict() for t in self.test_results],
        }


def validate_vector_structure(doc: Any) -> List[str]:
    """Validate vector file structure and return list of errors."""
    errors = []

    if not isinstance(doc, dict):
        return ["Vector file must be a mapping"]

    if 'test_vectors' not in doc:
        errors.append("Missing required field: 'test_vectors'")
        return errors

    vectors = doc['test_vectors']
    if not isinstance(vectors, list):
        errors.append("'test_vectors' must be an array")
        return errors

    for i, tv in enumerate(vectors):
        if not isinstance(tv, dict):
            errors.append(f"Test vector {i}: must be an object")
            continue

        label = tv.get('name', '?')
        if 'name' not in tv:
            errors.append(f"Test vector {i}: missing 'name'")

        if 'descriptor' not in tv:
            errors.append(f"Test vector {i} ({label}): missing 'descriptor'")
        elif not isinstance(tv['descriptor'], str):
            errors.append(f"Test vector {i} ({label}): 'descriptor' must be a string")

        if 'valid' in tv and not isinstance(tv['valid'], bool):
            errors.append(f"Test vector {i} ({label}): 'valid' must be true or false")

        if 'expected' in tv and not isinstance(tv['expected'], dict):
            errors.append(f"Test vector {i} ({label}): 'expected' must be an object")

        if tv.get('valid') is False and ('expected' in tv or 'wire' in tv):
            errors.append(f"Test vector {i} ({label}): invalid descriptor cannot have 'expected' or 'wire'")

    return errors


def read_field(config: ResTableConfig, key: str) -> Any:
    """Read a record field or sub-field view by name."""
    if key.startswith('_') or not hasattr(config, key):
        raise KeyError(key)
    value = getattr(config, key)
    if callable(value):
        raise KeyError(key)
    return int(value) if isinstance(value, int) else value


def run_test_vector(decoder: DescriptorDecoder, tv: Dict[str, Any]) -> TestResult:
    """Run a single test vector and return result."""
    descriptor = tv.get('descriptor', '')
    expected = tv.get('expected') or {}
    should_decode = tv.get('valid', True)

    result = TestResult(
        name=tv.get('name', 'unnamed'),
        passed=False,
        descriptor=descriptor,
        description=tv.get('description', ''),
        expected=expected,
    )

    try:
        config = decoder.decode(descriptor)
    except DecodeError as e:
        if should_decode:
            result.errors.append(f"Decode failed: {e}")
        else:
            result.passed = True
        return result

    result.actual = config.to_dict(include_defaults=False)

    if not should_decode:
        result.errors.append("Expected descriptor to be rejected")
        return result

    for key, expected_value in expected.items():
        try:
            actual_value = read_field(config, key)
        except KeyError:
            result.errors.append(f"Unknown field: '{key}'")
            continue

        result.actual[key] = actual_value
        if actual_value != expected_value:
            result.errors.append(f"{key}: expected {expected_value!r}, got {actual_value!r}")

    if 'wire' in tv:
        expected_wire = str(tv['wire']).replace(' ', '').upper()
        actual_wire = config.to_hex()
        if expected_wire != actual_wire:
            result.errors.append(f"wire: expected {expected_wire}, got {actual_wire}")

    result.passed = len(result.errors) == 0
    return result


def validate_vectors(doc: Any) -> ValidationResult:
    """Validate a vector document and run all its vectors."""
    result = ValidationResult(file_valid=True)

    structure_errors = validate_vector_structure(doc)
    if structure_errors:
        result.file_valid = False
        result.file_errors = structure_errors
        return result

    decoder = DescriptorDecoder()
    for tv in doc['test_vectors']:
        result.test_results.append(run_test_vector(decoder, tv))

    return result


def load_vectors(path: Path) -> Any:
    with open(path) as f:
        return yaml.safe_load(f)


def print_results(result: ValidationResult, verbose: bool = False):
    """Print validation results to console."""
    if result.file_valid:
        print("Vector file: VALID")
    else:
        print("Vector file: INVALID")
        for error in result.file_errors:
            print(f"  - {error}")
        return

    if result.total_tests == 0:
        print("\nNo test vectors found.")
        return

    print(f"\nTest Vectors: {result.tests_passed}/{result.total_tests} passed")
    print("-" * 50)

    for tr in result.test_results:
        status = "PASS" if tr.passed else "FAIL"
        symbol = "✓" if tr.passed else "✗"
        print(f"{symbol} {tr.name}: {status}")

        if verbose or not tr.passed:
            print(f"    Descriptor: {tr.descriptor!r}")
            if tr.description:
                print(f"    Description: {tr.description}")
            for error in tr.errors:
                print(f"    ERROR: {error}")
            if verbose and tr.passed and tr.actual:
                print(f"    Actual: {tr.actual}")
            print()

    print("-" * 50)
    if result.all_passed:
        print(f"PASSED: All {result.total_tests} tests passed")
    else:
        print(f"FAILED: {result.tests_failed} of {result.total_tests} tests failed")


def main():
    parser = argparse.ArgumentParser(
        description='Run qualifier descriptor test vectors'
    )
    parser.add_argument('vectors', type=Path, help='Path to vector YAML file')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show detailed output for all tests')
    parser.add_argument('--json', action='store_true',
                        help='Output results as JSON')
    args = parser.parse_args()

    try:
        doc = load_vectors(args.vectors)
    except (OSError, yaml.YAMLError) as e:
        print(f"Error loading vectors: {e}", file=sys.stderr)
        sys.exit(1)

    result = validate_vectors(doc)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(f"Validating: {args.vectors}")
        print("=" * 50)
        print_results(result, args.verbose)

    sys.exit(0 if result.all_passed else 1)


if __name__ == '__main__':
    main()
