import unittest

from pose_editor.core.constraints import ConstraintStore, pair_key
from pose_editor.core.skeleton import fitted_keypoints


class ConstraintStoreTests(unittest.TestCase):
    def test_pair_order_is_normalized(self):
        store = ConstraintStore()
        store.set(5, 1, 42.0)
        self.assertEqual(store.get(1, 5), 42.0)
        self.assertEqual(store.get(5, 1), 42.0)
        self.assertIn((5, 1), store)
        self.assertEqual(store.keys(), [(1, 5)])
        self.assertEqual(pair_key(9, 3), (3, 9))

    def test_same_endpoint_rejected(self):
        store = ConstraintStore()
        with self.assertRaises(ValueError):
            store.set(4, 4, 1.0)

    def test_remove_and_missing_get(self):
        store = ConstraintStore({(1, 2): 10.0})
        store.remove(2, 1)
        self.assertIsNone(store.get(1, 2))
        store.remove(2, 1)
        self.assertEqual(len(store), 0)

    def test_neighbors(self):
        store = ConstraintStore({(1, 2): 1.0, (1, 5): 1.0, (2, 3): 1.0})
        self.assertEqual(store.neighbors(1), {2, 5})
        self.assertEqual(store.neighbors(2), {1, 3})
        self.assertEqual(store.neighbors(17), set())

    def test_scaled_and_copy_do_not_alias(self):
        store = ConstraintStore({(1, 2): 10.0})
        scaled = store.scaled(2.5)
        clone = store.copy()
        clone.set(3, 4, 1.0)
        self.assertAlmostEqual(scaled.get(1, 2), 25.0)
        self.assertEqual(store.get(1, 2), 10.0)
        self.assertIsNone(store.get(3, 4))

    def test_recomputed_measures_current_positions(self):
        kps = fitted_keypoints(512, 512)
        store = ConstraintStore({(1, 2): 999.0})
        out = store.recomputed(kps)
        dx = kps[1].x - kps[2].x
        dy = kps[1].y - kps[2].y
        self.assertAlmostEqual(out.get(1, 2), (dx * dx + dy * dy) ** 0.5, places=9)

    def test_dict_round_trip_keys(self):
        store = ConstraintStore({(2, 1): 3.0})
        self.assertEqual(store.to_dict(), {"1-2": 3.0})
        self.assertEqual(ConstraintStore.from_dict({"1-2": 3.0}), store)


if __name__ == "__main__":
    unittest.main()
