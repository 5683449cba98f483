# Copyright Red Hat
#
# tests/compare/test_comparator.py - Tree comparator tests.
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import patch, MagicMock
import tempfile
import os

from pathdiff import (
    PathdiffCompareError,
    PathdiffCompareErrors,
    PathdiffListError,
    PathdiffReadError,
    PathdiffRenderError,
    PathdiffStatError,
    PathdiffUserError,
)
from pathdiff.compare import (
    CompareOptions,
    Outcome,
    SilentReporter,
    TreeComparator,
    diff,
)
from pathdiff.compare import comparator
from pathdiff.compare.reporter import Reporter

from ._util import make_tree

_real_stat = os.stat
_real_listdir = os.listdir


class TreeComparatorTestBase(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp_dir.cleanup)
        self.root = self.tmp_dir.name
        self.src = os.path.join(self.root, "src")
        self.dst = os.path.join(self.root, "dst")
        self.reporter = SilentReporter()

    def _comparator(self, **kwargs):
        return TreeComparator(self.reporter, CompareOptions(**kwargs))

    def _all_messages(self):
        return self.reporter.infos + self.reporter.warnings


class TestTreeComparator(TreeComparatorTestBase):
    def test_compare_directory_with_itself(self):
        make_tree(self.src, {"a.txt": "a\n", "sub": {"b.txt": "b\n"}})
        results = self._comparator().compare(self.src, self.src)
        self.assertEqual(self.reporter.warnings, [])
        self.assertEqual(self.reporter.infos, [])
        self.assertEqual(self.reporter.diffs, [])
        self.assertFalse(results.has_differences)
        self.assertEqual(results.count(Outcome.IDENTICAL), 2)

    def test_compare_file_with_itself(self):
        make_tree(self.src, {"a.txt": "a\n"})
        path = os.path.join(self.src, "a.txt")
        results = self._comparator().compare(path, path)
        self.assertEqual(self.reporter.diffs, [])
        self.assertEqual(results.differences, 0)

    def test_missing_src(self):
        make_tree(self.dst, {"a.txt": "a\n"})
        missing = os.path.join(self.root, "does", "not", "exist")
        results = self._comparator().compare(missing, self.dst)
        self.assertEqual(self.reporter.warnings, [f"src [{missing}] not exist"])
        self.assertEqual(self.reporter.diffs, [])
        self.assertEqual(results.count(Outcome.SOURCE_MISSING), 1)
        self.assertTrue(results.has_differences)

    def test_missing_dst(self):
        make_tree(self.src, {"a.txt": "a\n"})
        results = self._comparator().compare(self.src, self.dst)
        self.assertEqual(self.reporter.warnings, [f"dst [{self.dst}] not exist"])
        self.assertEqual(results.count(Outcome.DEST_MISSING), 1)

    def test_missing_src_does_not_stat_dst(self):
        missing = os.path.join(self.root, "missing")
        with patch(
            "pathdiff.compare.comparator._classify",
            wraps=comparator._classify,
        ) as mock_classify:
            self._comparator().compare(missing, self.dst)
        mock_classify.assert_called_once_with(missing, "src")

    def test_dangling_symlink_is_missing(self):
        make_tree(self.dst, {"a.txt": "a\n"})
        os.makedirs(self.src)
        os.symlink(os.path.join(self.root, "nowhere"), os.path.join(self.src, "a.txt"))
        results = self._comparator().compare(self.src, self.dst)
        self.assertEqual(results.count(Outcome.SOURCE_MISSING), 1)
        self.assertEqual(len(self.reporter.warnings), 1)

    def test_type_mismatch(self):
        make_tree(self.src, {"entry": "file\n"})
        make_tree(self.dst, {"entry": {"child": "x\n"}})
        src_entry = os.path.join(self.src, "entry")
        dst_entry = os.path.join(self.dst, "entry")
        comparator = self._comparator()
        with patch.object(comparator, "_compare_dirs") as mock_dirs:
            results = comparator.compare(src_entry, dst_entry)
            mock_dirs.assert_not_called()
        self.assertEqual(len(self.reporter.warnings), 1)
        self.assertIn("not same type", self.reporter.warnings[0])
        self.assertIn(src_entry, self.reporter.warnings[0])
        self.assertIn(dst_entry, self.reporter.warnings[0])
        self.assertEqual(results.count(Outcome.TYPE_MISMATCH), 1)

    def test_directory_matching(self):
        make_tree(self.src, {"a.txt": "one\n", "b.txt": "b\n"})
        make_tree(self.dst, {"a.txt": "two\n", "c.txt": "c\n"})
        results = self._comparator().compare(self.src, self.dst)

        self.assertEqual(
            self.reporter.diffs,
            [(os.path.join(self.src, "a.txt"), os.path.join(self.dst, "a.txt"))],
        )
        self.assertEqual(
            self.reporter.warnings,
            [f"src [{os.path.join(self.src, 'b.txt')}] not exist in dst"],
        )
        for msg in self._all_messages():
            self.assertNotIn("c.txt", msg)
        self.assertEqual(results.count(Outcome.DIFFERS), 1)
        self.assertEqual(results.count(Outcome.SOURCE_ONLY), 1)
        self.assertEqual(results.count(Outcome.DEST_ONLY), 0)

    def test_directory_matching_symmetric(self):
        make_tree(self.src, {"a.txt": "one\n", "b.txt": "b\n"})
        make_tree(self.dst, {"a.txt": "one\n", "c.txt": "c\n"})
        results = self._comparator(symmetric=True).compare(self.src, self.dst)
        self.assertEqual(
            self.reporter.warnings,
            [
                f"src [{os.path.join(self.src, 'b.txt')}] not exist in dst",
                f"dst [{os.path.join(self.dst, 'c.txt')}] not exist in src",
            ],
        )
        self.assertEqual(results.count(Outcome.DEST_ONLY), 1)

    def test_recursive_depth(self):
        tree = {"l1": {"l2": {"l3": {"leaf.txt": "same\n", "deep.txt": "old\n"}}}}
        make_tree(self.src, tree)
        tree["l1"]["l2"]["l3"]["deep.txt"] = "new\n"
        make_tree(self.dst, tree)

        results = self._comparator().compare(self.src, self.dst)
        rel = os.path.join("l1", "l2", "l3", "deep.txt")
        self.assertEqual(
            self.reporter.diffs,
            [(os.path.join(self.src, rel), os.path.join(self.dst, rel))],
        )
        self.assertEqual(self.reporter.warnings, [])
        self.assertEqual(results.count(Outcome.IDENTICAL), 1)

    def test_byte_identical_large_files(self):
        content = os.urandom(2**20)
        make_tree(self.src, {"big.bin": content})
        make_tree(self.dst, {"big.bin": content})
        results = self._comparator().compare(self.src, self.dst)
        self.assertEqual(self._all_messages(), [])
        self.assertEqual(self.reporter.diffs, [])
        self.assertEqual(results.count(Outcome.IDENTICAL), 1)

    def test_differing_file_reports_info(self):
        make_tree(self.src, {"a.txt": "one\n"})
        make_tree(self.dst, {"a.txt": "two\n"})
        src_a = os.path.join(self.src, "a.txt")
        dst_a = os.path.join(self.dst, "a.txt")
        self._comparator().compare(src_a, dst_a)
        self.assertEqual(self.reporter.infos, [f"Diff file src [{src_a}] dst [{dst_a}]"])

    def test_each_pair_visited_once_in_order(self):
        make_tree(self.src, {"c": "1\n", "a": "1\n", "b": "1\n"})
        make_tree(self.dst, {"a": "2\n", "b": "2\n", "c": "2\n"})
        self._comparator().compare(self.src, self.dst)
        self.assertEqual(
            [os.path.basename(a) for a, _ in self.reporter.diffs], ["a", "b", "c"]
        )


class TestTreeComparatorErrors(TreeComparatorTestBase):
    def test_stat_error_top_level(self):
        make_tree(self.src, {})
        with patch(
            "pathdiff.compare.comparator.os.stat",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            with self.assertRaises(PathdiffStatError) as ctx:
                self._comparator().compare(self.src, self.dst)
        self.assertEqual(ctx.exception.path, self.src)
        self.assertIsInstance(ctx.exception.__cause__, PermissionError)

    def test_stat_error_nested_is_wrapped(self):
        make_tree(self.src, {"sub": {"f": "1\n"}})
        make_tree(self.dst, {"sub": {"f": "1\n"}})
        bad = os.path.join(self.src, "sub", "f")

        def fake_stat(path, *args, **kwargs):
            if path == bad:
                raise PermissionError(13, "Permission denied", path)
            return _real_stat(path, *args, **kwargs)

        with patch("pathdiff.compare.comparator.os.stat", side_effect=fake_stat):
            with self.assertRaises(PathdiffCompareError) as ctx:
                self._comparator().compare(self.src, self.dst)

        err = ctx.exception
        self.assertEqual(err.src, self.src)
        self.assertEqual(err.dst, self.dst)
        self.assertIn(bad, str(err))
        # Breadcrumbs: root -> sub -> failing leaf
        self.assertIsInstance(err.__cause__, PathdiffCompareError)
        self.assertEqual(err.__cause__.src, os.path.join(self.src, "sub"))
        self.assertIsInstance(err.__cause__.__cause__, PathdiffStatError)

    def test_list_error(self):
        make_tree(self.src, {"a": "1\n"})
        make_tree(self.dst, {"a": "1\n"})

        def fake_listdir(path):
            if path == self.dst:
                raise PermissionError(13, "Permission denied", path)
            return _real_listdir(path)

        with patch("pathdiff.compare.comparator.os.listdir", side_effect=fake_listdir):
            with self.assertRaises(PathdiffCompareError) as ctx:
                self._comparator().compare(self.src, self.dst)

        self.assertIn("Failed to diff dir", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, PathdiffListError)
        self.assertEqual(ctx.exception.__cause__.path, self.dst)

    def test_read_error(self):
        make_tree(self.src, {"a": "1\n"})
        make_tree(self.dst, {"a": "2\n"})
        src_a = os.path.join(self.src, "a")
        dst_a = os.path.join(self.dst, "a")
        with patch(
            "pathdiff.compare.comparator.open",
            create=True,
            side_effect=PermissionError(13, "Permission denied"),
        ):
            with self.assertRaises(PathdiffCompareError) as ctx:
                self._comparator().compare(src_a, dst_a)
        self.assertIsInstance(ctx.exception.__cause__, PathdiffReadError)
        self.assertIn("Failed to diff file", str(ctx.exception))

    def test_render_error_is_wrapped_with_paths(self):
        make_tree(self.src, {"a": "1\n"})
        make_tree(self.dst, {"a": "2\n"})
        src_a = os.path.join(self.src, "a")
        dst_a = os.path.join(self.dst, "a")
        reporter = MagicMock(spec=Reporter)
        reporter.render_diff.side_effect = PathdiffRenderError("broken sink")
        with self.assertRaises(PathdiffCompareError) as ctx:
            TreeComparator(reporter).compare(src_a, dst_a)
        self.assertIn(src_a, str(ctx.exception))
        self.assertIn(dst_a, str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, PathdiffRenderError)

    def _make_failing_trees(self):
        make_tree(self.src, {"a": {"f": "1\n"}, "b": {"g": "old\n"}})
        make_tree(self.dst, {"a": {"f": "1\n"}, "b": {"g": "new\n"}})
        bad = os.path.join(self.src, "a")

        def fake_listdir(path):
            if path == bad:
                raise PermissionError(13, "Permission denied", path)
            return _real_listdir(path)

        return fake_listdir

    def test_fail_fast_aborts_siblings(self):
        fake_listdir = self._make_failing_trees()
        with patch("pathdiff.compare.comparator.os.listdir", side_effect=fake_listdir):
            with self.assertRaises(PathdiffCompareError):
                self._comparator().compare(self.src, self.dst)
        self.assertEqual(self.reporter.diffs, [])

    def test_collect_continues_siblings(self):
        fake_listdir = self._make_failing_trees()
        with patch("pathdiff.compare.comparator.os.listdir", side_effect=fake_listdir):
            with self.assertRaises(PathdiffCompareErrors) as ctx:
                self._comparator(error_policy="collect").compare(self.src, self.dst)

        err = ctx.exception
        self.assertEqual(len(err.errors), 1)
        self.assertIsInstance(err.errors[0], PathdiffCompareError)
        self.assertEqual(err.errors[0].src, self.src)
        self.assertEqual(err.errors[0].dst, self.dst)
        self.assertIsInstance(err.errors[0].__cause__, PathdiffCompareError)
        self.assertIsInstance(err.errors[0].__cause__.__cause__, PathdiffListError)
        self.assertEqual(
            self.reporter.diffs,
            [(os.path.join(self.src, "b", "g"), os.path.join(self.dst, "b", "g"))],
        )
        self.assertEqual(err.results.count(Outcome.DIFFERS), 1)
        self.assertIs(err.results.errors[0], err.errors[0])

    def test_collect_wraps_nested_stat_error(self):
        make_tree(self.src, {"sub": {"f": "1\n", "g": "old\n"}})
        make_tree(self.dst, {"sub": {"f": "1\n", "g": "new\n"}})
        sub_src = os.path.join(self.src, "sub")
        sub_dst = os.path.join(self.dst, "sub")
        bad = os.path.join(sub_src, "f")

        def fake_stat(path, *args, **kwargs):
            if path == bad:
                raise PermissionError(13, "Permission denied", path)
            return _real_stat(path, *args, **kwargs)

        with patch("pathdiff.compare.comparator.os.stat", side_effect=fake_stat):
            with self.assertRaises(PathdiffCompareErrors) as ctx:
                self._comparator(error_policy="collect").compare(self.src, self.dst)

        err = ctx.exception
        self.assertEqual(len(err.errors), 1)
        wrapped = err.errors[0]
        self.assertIsInstance(wrapped, PathdiffCompareError)
        self.assertEqual(wrapped.src, sub_src)
        self.assertEqual(wrapped.dst, sub_dst)
        self.assertIn(bad, str(wrapped))
        self.assertIsInstance(wrapped.__cause__, PathdiffStatError)
        self.assertEqual(
            self.reporter.diffs,
            [(os.path.join(sub_src, "g"), os.path.join(sub_dst, "g"))],
        )


class TestDiff(TreeComparatorTestBase):
    def test_diff_expands_home(self):
        make_tree(self.src, {"a.txt": "one\n"})
        make_tree(self.dst, {"a.txt": "two\n"})
        with patch("pathdiff._pathdiff._home_dir", return_value=self.root):
            results = diff("~/src", "~/dst", reporter=self.reporter)
        self.assertEqual(
            self.reporter.diffs,
            [(os.path.join(self.src, "a.txt"), os.path.join(self.dst, "a.txt"))],
        )
        self.assertEqual(results.count(Outcome.DIFFERS), 1)

    def test_diff_plain_paths(self):
        make_tree(self.src, {"a.txt": "one\n"})
        make_tree(self.dst, {"a.txt": "one\n"})
        results = diff(self.src, self.dst, reporter=self.reporter)
        self.assertFalse(results.has_differences)

    def test_diff_home_failure_before_filesystem_access(self):
        with patch(
            "pathdiff._pathdiff._home_dir",
            side_effect=PathdiffUserError("no home"),
        ):
            with patch("pathdiff.compare.comparator._classify") as mock_classify:
                with self.assertRaises(PathdiffUserError) as ctx:
                    diff(self.src, "~/dst", reporter=self.reporter)
                mock_classify.assert_not_called()
        self.assertIn("~/dst", str(ctx.exception))
        self.assertEqual(self._all_messages(), [])
