"""
Tests for configuration validation.
"""

import dataclasses
import unittest

from iplom.config import ConfigurationError, IPLoMConfig, DEFAULT_DELIMITERS


class TestIPLoMConfig(unittest.TestCase):
    """Test defaults and fail-fast validation."""

    def test_defaults(self):
        config = IPLoMConfig()

        self.assertEqual(config.delimiters, DEFAULT_DELIMITERS)
        self.assertEqual(config.partition_support_threshold, 0.05)
        self.assertEqual(config.cluster_goodness_threshold, 0.8)
        self.assertLess(config.lower_bound, 0.5)
        self.assertGreater(config.upper_bound, 0.5)
        self.assertIsNone(config.max_refinement_steps)
        self.assertEqual(config.joiner, " ")

    def test_invalid_values(self):
        invalid = [
            {"partition_support_threshold": -0.1},
            {"partition_support_threshold": 1.1},
            {"cluster_goodness_threshold": 1.5},
            {"cluster_goodness_threshold": -1.0},
            {"lower_bound": 0.0},
            {"upper_bound": 1.0},
            {"lower_bound": 0.6, "upper_bound": 0.4},
            {"lower_bound": 0.3, "upper_bound": 0.3},
            {"lower_bound": 0.5, "upper_bound": 0.9},
            {"lower_bound": 0.1, "upper_bound": 0.5},
            {"wildcard": ""},
            {"max_refinement_steps": 0},
            {"delimiters": None},
            {"partition_support_threshold": "0.5"},
            {"cluster_goodness_threshold": None},
            {"lower_bound": "0.1"},
            {"upper_bound": True},
            {"max_refinement_steps": 2.5},
            {"max_refinement_steps": "10"},
        ]

        for changes in invalid:
            with self.subTest(changes=changes):
                with self.assertRaises(ConfigurationError):
                    IPLoMConfig(**changes)

    def test_boundary_values_accepted(self):
        for value in (0.0, 1.0):
            with self.subTest(value=value):
                config = IPLoMConfig(partition_support_threshold=value,
                                     cluster_goodness_threshold=value)
                self.assertEqual(config.partition_support_threshold, value)

    def test_configuration_error_is_value_error(self):
        with self.assertRaises(ValueError):
            IPLoMConfig(partition_support_threshold=2)

    def test_immutable(self):
        config = IPLoMConfig()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            config.partition_support_threshold = 0.5

    def test_replace_validates(self):
        config = IPLoMConfig().replace(cluster_goodness_threshold=0.5)
        self.assertEqual(config.cluster_goodness_threshold, 0.5)

        with self.assertRaises(ConfigurationError):
            IPLoMConfig().replace(upper_bound=0.05)

    def test_joiner_without_space(self):
        self.assertEqual(IPLoMConfig(delimiters=",;").joiner, ",")
        self.assertEqual(IPLoMConfig(delimiters="").joiner, " ")


if __name__ == '__main__':
    unittest.main()
