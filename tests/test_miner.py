"""
Tests for the iterative refinement driver.
"""

import io
import os
import random
import tempfile
import unittest
from contextlib import redirect_stdout

from iplom import IPLoMConfig, IPLoMMiner
from iplom.models import PartitionKey, PartitionStage
from tests.test_data.log_samples import (
    COPY_LINES, COPY_TEMPLATES, LOGIN_LINES, LOGIN_TEMPLATES, MIXED_LINES, RARE_LINES
)


def template_sizes(result):
    return {cluster.template.pattern: cluster.size for cluster in result.clusters}


class TestIPLoMMiner(unittest.TestCase):
    """Test mining end to end on small corpora."""

    def setUp(self):
        self.miner = IPLoMMiner()

    def test_login_example(self):
        result = self.miner.mine(LOGIN_LINES)

        self.assertEqual(template_sizes(result), LOGIN_TEMPLATES)
        self.assertEqual(result.outliers, [])
        self.assertEqual(result.line_count, 4)
        self.assertFalse(result.aborted)

    def test_clusters_sorted_by_key(self):
        result = self.miner.mine(LOGIN_LINES)

        self.assertEqual([cluster.key for cluster in result.clusters], [
            PartitionKey(3),
            PartitionKey(4, ((3, "fail"),)),
            PartitionKey(4, ((3, "ok"),)),
        ])

    def test_bijection_refinement(self):
        result = self.miner.mine(COPY_LINES)

        self.assertEqual(template_sizes(result), COPY_TEMPLATES)
        keys = [cluster.key for cluster in result.clusters]
        self.assertIn(PartitionKey(4, ((3, "done"), (1, "src1"))), keys)
        self.assertIn(PartitionKey(4, ((3, "done"), (1, "src2"))), keys)

    def test_empty_input(self):
        result = self.miner.mine([])

        self.assertEqual(result.clusters, [])
        self.assertEqual(result.outliers, [])
        self.assertEqual(result.line_count, 0)

    def test_blank_line_forms_empty_cluster(self):
        result = self.miner.mine(["", ""])

        self.assertEqual(len(result.clusters), 1)
        cluster = result.clusters[0]
        self.assertEqual(cluster.token_count, 0)
        self.assertEqual(cluster.template.pattern, "")
        self.assertEqual(cluster.size, 2)

    def test_identical_lines_form_one_cluster(self):
        result = self.miner.mine(["user X login ok"] * 5)

        self.assertEqual(template_sizes(result), {"user X login ok": 5})

    def test_instantiated_templates_mine_back_to_one_cluster(self):
        mined = self.miner.mine(LOGIN_LINES + MIXED_LINES)

        for cluster in mined.clusters:
            template = cluster.template
            for filler in ("X", "0"):
                line = template.joiner.join(slot.render(filler) for slot in template.slots)
                with self.subTest(template=template.pattern, filler=filler):
                    result = self.miner.mine([line] * 3)

                    self.assertEqual(len(result.clusters), 1)
                    self.assertEqual(result.outliers, [])
                    self.assertEqual(result.clusters[0].size, 3)
                    self.assertEqual(result.clusters[0].template.pattern, line)
                    self.assertTrue(template.matches(result.clusters[0].template.tokens))

    def test_rare_line_becomes_outlier(self):
        result = self.miner.mine(RARE_LINES)

        self.assertEqual(template_sizes(result), {"a <*>": 20})
        self.assertEqual(len(result.outliers), 1)
        outlier = result.outliers[0]
        self.assertTrue(outlier.is_outlier)
        self.assertEqual(outlier.stage, PartitionStage.POSITION)
        self.assertEqual(outlier.key, PartitionKey(2))
        self.assertEqual([line.text for line in result.outliers_by_length()[2]], ["b 20"])

    def test_support_threshold_zero_keeps_everything(self):
        miner = IPLoMMiner(IPLoMConfig(partition_support_threshold=0.0))
        result = miner.mine(RARE_LINES)

        self.assertEqual(result.outliers, [])
        self.assertEqual(template_sizes(result), {"a <*>": 20, "b 20": 1})

    def test_every_line_lands_exactly_once(self):
        result = self.miner.mine(MIXED_LINES)

        seen = [line.line_id for cluster in result.clusters for line in cluster.lines]
        seen += [line.line_id for partition in result.outliers for line in partition.lines]
        self.assertEqual(sorted(seen), list(range(len(MIXED_LINES))))

    def test_clusters_are_length_homogeneous_and_sound(self):
        result = self.miner.mine(MIXED_LINES)

        for cluster in result.clusters:
            with self.subTest(cluster=cluster.template.pattern):
                self.assertEqual({line.token_count for line in cluster.lines},
                                 {cluster.token_count})
                self.assertEqual(len(cluster.template), cluster.token_count)
                for line in cluster.lines:
                    self.assertTrue(cluster.key.matches(line))
                    self.assertTrue(cluster.template.matches(line.tokens))
                for position, slot in enumerate(cluster.template.slots):
                    values = {line.tokens[position] for line in cluster.lines}
                    if slot.is_wildcard:
                        self.assertGreater(len(values), 1)
                    else:
                        self.assertEqual(values, {slot.value})

    def test_outlier_partitions_hold_one_token_count(self):
        result = self.miner.mine(RARE_LINES + ["c 1 2"] * 3)

        for partition in result.outliers:
            self.assertEqual({line.token_count for line in partition.lines},
                             {partition.token_count})

    def test_input_order_does_not_change_templates(self):
        shuffled = list(MIXED_LINES)
        random.Random(7).shuffle(shuffled)

        first = self.miner.mine(MIXED_LINES)
        second = self.miner.mine(shuffled)

        self.assertEqual(sorted(template_sizes(first).items()),
                         sorted(template_sizes(second).items()))
        self.assertEqual([c.cluster_id for c in first.clusters],
                         [c.cluster_id for c in second.clusters])

    def test_repeated_runs_are_identical(self):
        first = self.miner.mine(MIXED_LINES)
        second = self.miner.mine(MIXED_LINES)

        self.assertEqual(first.to_dict(), second.to_dict())

    def test_step_guard_accepts_remaining_partitions(self):
        miner = IPLoMMiner(IPLoMConfig(max_refinement_steps=1))

        output = io.StringIO()
        with redirect_stdout(output):
            result = miner.mine(COPY_LINES)

        self.assertTrue(result.aborted)
        self.assertIn("Warning: refinement stopped after 1 splits", output.getvalue())
        self.assertEqual(template_sizes(result), {
            "copy <*> <*> done": 4,
            "copy src3 dst3 failed": 1,
        })
        aborted = [cluster for cluster in result.clusters if cluster.aborted]
        self.assertEqual([cluster.template.pattern for cluster in aborted], ["copy <*> <*> done"])

    def test_verbose_output(self):
        miner = IPLoMMiner(verbose=True)

        output = io.StringIO()
        with redirect_stdout(output):
            miner.mine(LOGIN_LINES)

        self.assertIn("Mining templates from 4 log lines", output.getvalue())
        self.assertIn("Extracted 3 clusters", output.getvalue())

    def test_partition_by_length(self):
        groups = self.miner.partition_by_length(LOGIN_LINES)

        self.assertEqual(list(groups), [3, 4])
        self.assertEqual(groups[4].size, 3)
        self.assertEqual(groups[3].lines[0].text, "disk sda1 full")


class TestMineFile(unittest.TestCase):
    """Test mining straight from a log file."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.log_file = os.path.join(self.temp_dir, "app.log")
        with open(self.log_file, 'w', encoding='utf-8') as f:
            f.write("\r\n".join(LOGIN_LINES) + "\r\n")

    def tearDown(self):
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_mine_file(self):
        result = IPLoMMiner().mine_file(self.log_file)

        self.assertEqual(template_sizes(result), LOGIN_TEMPLATES)

    def test_mine_file_with_limit(self):
        result = IPLoMMiner().mine_file(self.log_file, limit=2)

        self.assertEqual(result.line_count, 2)
        self.assertEqual(template_sizes(result), {"user <*> login ok": 2})


if __name__ == '__main__':
    unittest.main()
