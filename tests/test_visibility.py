import unittest

from pose_editor.core.skeleton import fitted_keypoints, update_joints
from pose_editor.core.visibility import (
    descendants,
    toggle_all_locked,
    toggle_all_visibility,
    toggle_flag,
    toggle_visibility,
)


def _visible(kps):
    return {kp.id for kp in kps if kp.visible}


class VisibilityCascadeTests(unittest.TestCase):
    def test_neck_descendants(self):
        self.assertEqual(descendants(1), {0, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16, 17})
        self.assertEqual(descendants(0), {14, 15, 16, 17})
        self.assertEqual(descendants(4), set())

    def test_hiding_neck_hides_downstream_closure(self):
        kps = fitted_keypoints(512, 512)
        out = toggle_visibility(kps, 1)
        hidden = {kp.id for kp in out if not kp.visible}
        self.assertTrue({1, 0, 2, 5, 8, 11, 14, 15, 16, 17}.issubset(hidden))

    def test_hiding_elbow_leaves_upper_body(self):
        kps = fitted_keypoints(512, 512)
        out = toggle_visibility(kps, 3)
        self.assertEqual(_visible(kps) - _visible(out), {3, 4})

    def test_showing_does_not_reshow_descendants(self):
        kps = fitted_keypoints(512, 512)
        hidden = toggle_visibility(kps, 1)
        shown = toggle_visibility(hidden, 1)
        self.assertEqual(_visible(shown), {1})

    def test_showing_child_leaves_parent_hidden(self):
        kps = toggle_visibility(fitted_keypoints(512, 512), 2)
        out = toggle_visibility(kps, 4)
        self.assertTrue(out[4].visible)
        self.assertFalse(out[2].visible)
        self.assertFalse(out[3].visible)

    def test_toggle_all_visibility(self):
        kps = fitted_keypoints(512, 512)
        hidden = toggle_all_visibility(kps)
        self.assertEqual(_visible(hidden), set())
        partial = update_joints(kps, [3], visible=False)
        self.assertEqual(len(_visible(toggle_all_visibility(partial))), 18)

    def test_lock_flags(self):
        kps = fitted_keypoints(512, 512)
        locked = toggle_flag(kps, 6, "locked")
        self.assertTrue(locked[6].locked)
        self.assertFalse(locked[5].locked)
        all_locked = toggle_all_locked(locked)
        self.assertTrue(all(kp.locked for kp in all_locked))
        self.assertFalse(any(kp.locked for kp in toggle_all_locked(all_locked)))


if __name__ == "__main__":
    unittest.main()
