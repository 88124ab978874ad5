import itertools
import unittest

import numpy as np

from pose_editor.core.constraints import ConstraintStore
from pose_editor.core.drag import connected_component, drag_joint, translate_all
from pose_editor.core.skeleton import distance, fitted_keypoints, initial_keypoints, with_positions


def _line_pose():
    xy = np.array([[10.0 * i, 5.0 * (i % 3)] for i in range(18)], dtype=float)
    return with_positions(initial_keypoints(), xy)


class DragEngineTests(unittest.TestCase):
    def test_connected_component_follows_chain(self):
        store = ConstraintStore({(1, 2): 1.0, (2, 3): 1.0, (3, 4): 1.0, (8, 9): 1.0})
        self.assertEqual(connected_component(store, 3), {1, 2, 3, 4})
        self.assertEqual(connected_component(store, 0), {0})

    def test_translate_moves_component_rigidly(self):
        kps = fitted_keypoints(512, 512)
        store = ConstraintStore()
        for a, b in [(1, 2), (2, 3), (3, 4), (1, 5)]:
            store.set(a, b, distance(kps[a], kps[b]))
        out = drag_joint(kps, store, 3, kps[3].x + 12.5, kps[3].y - 7.0, mode="translate")
        group = {1, 2, 3, 4, 5}
        for kp_before, kp_after in zip(kps, out):
            if kp_before.id in group:
                self.assertAlmostEqual(kp_after.x - kp_before.x, 12.5, places=9)
                self.assertAlmostEqual(kp_after.y - kp_before.y, -7.0, places=9)
            else:
                self.assertEqual((kp_after.x, kp_after.y), (kp_before.x, kp_before.y))
        for a, b in itertools.combinations(sorted(group), 2):
            self.assertAlmostEqual(distance(out[a], out[b]), distance(kps[a], kps[b]), places=9)

    def test_translate_without_constraints_moves_only_target(self):
        kps = _line_pose()
        out = drag_joint(kps, ConstraintStore(), 7, 100.0, 200.0)
        self.assertEqual((out[7].x, out[7].y), (100.0, 200.0))
        self.assertEqual(out[6], kps[6])

    def test_single_constraint_keeps_distance(self):
        kps = _line_pose()
        store = ConstraintStore({(3, 4): 25.0})
        for target in [(300.0, 10.0), (30.0, 30.0), (31.0, 0.0), (0.0, 512.0)]:
            out = drag_joint(kps, store, 4, target[0], target[1], mode="constraint")
            self.assertAlmostEqual(distance(out[4], out[3]), 25.0, places=9)
            self.assertEqual(out[3], kps[3])

    def test_constraint_mode_points_toward_target(self):
        kps = _line_pose()
        anchor = kps[3]
        store = ConstraintStore({(3, 4): 10.0})
        out = drag_joint(kps, store, 4, anchor.x, anchor.y + 50.0, mode="constraint")
        np.testing.assert_allclose(out[4].xy, anchor.xy + np.array([0.0, 10.0]), atol=1e-9)

    def test_coincident_target_falls_back_to_raw_target(self):
        kps = _line_pose()
        store = ConstraintStore({(3, 4): 10.0})
        out = drag_joint(kps, store, 4, kps[3].x, kps[3].y, mode="constraint")
        np.testing.assert_allclose(out[4].xy, kps[3].xy, atol=1e-12)

    def test_multiple_constraints_average_candidates(self):
        kps = with_positions(
            initial_keypoints(),
            np.array([[0.0, 0.0]] * 18, dtype=float),
        )
        kps = list(kps)
        kps[2] = kps[2].moved_to(0.0, 0.0)
        kps[4] = kps[4].moved_to(20.0, 0.0)
        kps = tuple(kps)
        store = ConstraintStore({(2, 3): 5.0, (3, 4): 5.0})
        out = drag_joint(kps, store, 3, 10.0, 10.0, mode="constraint")
        c1 = np.array([10.0, 10.0]) / np.sqrt(200.0) * 5.0
        c2 = np.array([20.0, 0.0]) + np.array([-10.0, 10.0]) / np.sqrt(200.0) * 5.0
        np.testing.assert_allclose(out[3].xy, (c1 + c2) / 2.0, atol=1e-9)
        self.assertEqual(out[2], kps[2])
        self.assertEqual(out[4], kps[4])

    def test_unknown_mode_rejected(self):
        with self.assertRaises(ValueError):
            drag_joint(_line_pose(), ConstraintStore(), 1, 0.0, 0.0, mode="spin")

    def test_translate_all(self):
        kps = _line_pose()
        out = translate_all(kps, 3.0, -4.0)
        np.testing.assert_allclose(
            np.array([kp.xy for kp in out]) - np.array([kp.xy for kp in kps]),
            np.tile([3.0, -4.0], (18, 1)),
        )


if __name__ == "__main__":
    unittest.main()
