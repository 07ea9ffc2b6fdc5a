import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from git_graph_data import Commit, CommitPage, GraphLayout
from git_graph_layout import calculate_graph_layout
from git_graph_session import GraphSession, PageRequest


def make_commit(commit_hash: str, *parents: str) -> Commit:
    return Commit(hash=commit_hash, short_hash=commit_hash[:7], message=commit_hash, parents=parents)


# main and feature diverge from base, merged at M
HISTORY = [
    make_commit("M", "C3", "F2"),
    make_commit("C3", "C2"),
    make_commit("F2", "F1"),
    make_commit("C2", "C1"),
    make_commit("F1", "C1"),
    make_commit("C1", "C0"),
    make_commit("C0"),
]


class TestGraphSessionLoadPage(unittest.TestCase):
    def setUp(self):
        self.session = GraphSession()

    def test_initial_state(self):
        self.assertEqual(self.session.commits, [])
        self.assertEqual(self.session.layout, GraphLayout.empty())
        self.assertEqual(self.session.cursor, 0)
        self.assertTrue(self.session.has_more)
        self.assertIsNone(self.session.error)

    def test_fresh_load_replaces(self):
        self.session.load_page(HISTORY[:3], append=False, has_more=True)
        new_count = self.session.load_page(HISTORY[3:5], append=False, has_more=False)
        self.assertEqual(new_count, 2)
        self.assertEqual([c.hash for c in self.session.commits], ["C2", "F1"])
        self.assertEqual(self.session.cursor, 2)
        self.assertFalse(self.session.has_more)

    def test_pagination_equivalence(self):
        self.session.load_page(HISTORY[:4], append=False, has_more=True)
        self.session.load_page(HISTORY[4:], append=True, has_more=False)
        self.assertEqual(self.session.layout, calculate_graph_layout(HISTORY))
        self.assertEqual(self.session.cursor, len(HISTORY))
        self.assertFalse(self.session.has_more)

    def test_first_page_has_dangling_parents(self):
        self.session.load_page(HISTORY[:3], append=False, has_more=True)
        layout = self.session.layout
        self.assertEqual(len(layout.nodes), 3)
        self.assertEqual({(c.from_hash, c.to_hash) for c in layout.connections}, {("M", "C3"), ("M", "F2")})

    def test_overlapping_page_is_deduplicated(self):
        self.session.load_page(HISTORY[:4], append=False, has_more=True)
        new_count = self.session.load_page(HISTORY[2:], append=True, has_more=False)
        self.assertEqual(new_count, 3)
        self.assertEqual([c.hash for c in self.session.commits], [c.hash for c in HISTORY])
        self.assertEqual([n.row for n in self.session.layout.nodes], list(range(len(HISTORY))))
        self.assertEqual(self.session.layout, calculate_graph_layout(HISTORY))
        # Cursor only advances by commits that were new
        self.assertEqual(self.session.cursor, 7)

    def test_page_of_known_commits_changes_nothing(self):
        self.session.load_page(HISTORY, append=False, has_more=True)
        before = self.session.layout
        new_count = self.session.load_page(HISTORY[1:3], append=True, has_more=False)
        self.assertEqual(new_count, 0)
        self.assertEqual(self.session.cursor, len(HISTORY))
        self.assertEqual(self.session.layout, before)
        self.assertFalse(self.session.has_more)

    def test_repeated_hash_within_page(self):
        self.session.load_page([HISTORY[0], HISTORY[1], HISTORY[1]], append=False, has_more=True)
        self.assertEqual([c.hash for c in self.session.commits], ["M", "C3"])
        self.session.load_page([HISTORY[2], HISTORY[2]], append=True, has_more=True)
        self.assertEqual([c.hash for c in self.session.commits], ["M", "C3", "F2"])
        self.assertEqual(self.session.cursor, 3)

    def test_reset(self):
        self.session.load_page(HISTORY, append=False, has_more=False)
        generation = self.session.generation
        self.session.reset()
        self.assertEqual(self.session.commits, [])
        self.assertEqual(self.session.layout.rail_count, 0)
        self.assertEqual(self.session.cursor, 0)
        self.assertTrue(self.session.has_more)
        self.assertEqual(self.session.generation, generation + 1)
        # Hashes seen before the reset count as new again
        self.assertEqual(self.session.load_page(HISTORY[:2], append=True, has_more=True), 2)


class TestGraphSessionRequests(unittest.TestCase):
    def setUp(self):
        self.session = GraphSession()

    def test_refresh_then_load_more(self):
        request = self.session.begin_load(append=False)
        self.assertEqual(request, PageRequest(generation=self.session.generation, offset=0, append=False))
        self.assertTrue(self.session.loading)
        # Nothing else starts while the first page is outstanding
        self.assertIsNone(self.session.begin_load(append=True))

        self.assertTrue(self.session.apply_page(request, CommitPage(tuple(HISTORY[:4]), has_more=True)))
        self.assertFalse(self.session.in_flight)

        more = self.session.begin_load(append=True)
        self.assertEqual(more.offset, 4)
        self.assertTrue(more.append)
        self.assertTrue(self.session.loading_more)
        self.assertIsNone(self.session.begin_load(append=True))

        self.assertTrue(self.session.apply_page(more, CommitPage(tuple(HISTORY[4:]), has_more=False)))
        self.assertEqual(self.session.layout, calculate_graph_layout(HISTORY))

    def test_no_load_more_when_exhausted(self):
        request = self.session.begin_load(append=False)
        self.session.apply_page(request, CommitPage(tuple(HISTORY), has_more=False))
        self.assertIsNone(self.session.begin_load(append=True))

    def test_stale_page_after_reset_is_dropped(self):
        request = self.session.begin_load(append=False)
        self.session.apply_page(request, CommitPage(tuple(HISTORY[:2]), has_more=True))
        more = self.session.begin_load(append=True)

        self.session.reset()
        self.assertTrue(self.session.is_stale(more))
        self.assertFalse(self.session.apply_page(more, CommitPage(tuple(HISTORY[2:]), has_more=False)))
        self.assertEqual(self.session.commits, [])
        self.assertFalse(self.session.fail(more, "boom"))
        self.assertIsNone(self.session.error)

    def test_refresh_while_loading_drops_old_page(self):
        old = self.session.begin_load(append=False)
        new = self.session.begin_load(append=False)
        self.assertNotEqual(old.generation, new.generation)
        self.assertFalse(self.session.apply_page(old, CommitPage(tuple(HISTORY[:1]), has_more=True)))
        self.assertTrue(self.session.loading)
        self.assertTrue(self.session.apply_page(new, CommitPage(tuple(HISTORY[:2]), has_more=True)))
        self.assertEqual([c.hash for c in self.session.commits], ["M", "C3"])

    def test_failure_keeps_previous_layout(self):
        request = self.session.begin_load(append=False)
        self.session.apply_page(request, CommitPage(tuple(HISTORY[:4]), has_more=True))
        layout = self.session.layout

        more = self.session.begin_load(append=True)
        self.assertTrue(self.session.fail(more, "connection refused"))
        self.assertEqual(self.session.error, "connection refused")
        self.assertFalse(self.session.in_flight)
        self.assertEqual(self.session.layout, layout)
        self.assertEqual(self.session.cursor, 4)

        # Retry picks up at the same offset and clears the error
        retry = self.session.begin_load(append=True)
        self.assertEqual(retry.offset, 4)
        self.session.apply_page(retry, CommitPage(tuple(HISTORY[4:]), has_more=False))
        self.assertIsNone(self.session.error)
        self.assertEqual(len(self.session.layout.nodes), len(HISTORY))


if __name__ == "__main__":
    unittest.main()
