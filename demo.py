#!/usr/bin/env python3
"""
Demo script for the iterative partitioning log miner.
"""

import tempfile
from pathlib import Path

from iplom import IPLoMConfig, IPLoMMiner, TemplateTrie


def create_sample_logs():
    """Create sample log lines for mining."""
    return [
        "user bob login ok",
        "user alice login ok",
        "user carol login fail",
        "disk sda1 full",
        "Connection from 10.0.0.1 closed",
        "Connection from 10.0.0.2 closed",
        "Connection from 10.0.0.3 closed",
        "open file /var/log/a.log",
        "close file /var/log/b.log",
        "open file /var/log/c.log",
        "close file /var/log/d.log",
        "",
    ]


def create_new_logs():
    """Create unseen log lines for matching."""
    return [
        "user dave login ok",
        "Connection from 192.168.1.7 closed",
        "disk sda1 full",
        "Some unrelated log message that won't match any template",
    ]


def main():
    """Run the demo."""
    print("🚀 Iterative Partitioning Log Mining Demo")
    print("=" * 50)

    temp_dir = tempfile.mkdtemp()
    print(f"📁 Working in temporary directory: {temp_dir}")

    try:
        # Step 1: Write a sample log file
        log_file = Path(temp_dir) / "sample.log"
        with open(log_file, 'w') as f:
            f.write("\n".join(create_sample_logs()) + "\n")
        print(f"📝 Created sample log file: {log_file.name}")

        # Step 2: Mine templates
        print("\n🔍 Mining templates...")
        miner = IPLoMMiner(IPLoMConfig(partition_support_threshold=0.05), verbose=True)
        result = miner.mine_file(str(log_file))

        print(f"✅ Mined {len(result.clusters)} clusters")

        print("\n📋 Clusters:")
        for i, cluster in enumerate(result.clusters, 1):
            print(f"  {i:2}. [{cluster.size:3}x] {cluster.template.pattern!r}")
            print(f"      🔑 {cluster.key}")

        for token_count, lines in result.outliers_by_length().items():
            print(f"  ⚠️  {len(lines)} outlier lines with {token_count} tokens")

        # Step 3: Match unseen lines
        print("\n🎯 Matching new log lines:")
        trie = TemplateTrie.from_result(result, miner.config)
        for i, log_line in enumerate(create_new_logs(), 1):
            best = trie.get_best_match(log_line)
            print(f"\n  {i}. Log: {log_line}")
            if best:
                print(f"     ✅ Match: {best.template.pattern}")
                print(f"     📊 Confidence: {best.confidence:.3f}")
                print(f"     📤 Extracted: {best.extracted_values}")
            else:
                print(f"     ❌ No match found")

        print(f"\n🎉 Demo completed successfully!")

    except Exception as e:
        print(f"\n❌ Demo failed with error: {e}")
        import traceback
        traceback.print_exc()

    finally:
        import shutil
        shutil.rmtree(temp_dir, ignore_errors=True)
        print(f"\n🧹 Cleaned up temporary directory")


if __name__ == '__main__':
    main()
