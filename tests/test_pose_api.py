import tempfile
import unittest
from pathlib import Path

try:
    from fastapi.testclient import TestClient
except Exception:  # noqa: BLE001
    TestClient = None


@unittest.skipUnless(TestClient is not None, "fastapi testclient/httpx not installed")
class PoseApiTests(unittest.TestCase):
    def setUp(self):
        from pose_editor.main import create_app

        self._tmp = tempfile.TemporaryDirectory()
        self.app = create_app(Path(self._tmp.name) / "default.yaml")
        self.client = TestClient(self.app)
        self.token = self.app.state.runtime.config_store.config.server.token
        self.headers = {"x-access-token": self.token}

    def tearDown(self):
        self._tmp.cleanup()

    def test_pose_requires_token(self):
        response = self.client.get("/api/pose")
        self.assertEqual(response.status_code, 401)

    def test_drag_then_undo(self):
        start = self.client.get("/api/pose", headers=self.headers).json()
        resp = self.client.post("/api/pose/drag/start", json={"joint_id": 4}, headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        resp = self.client.post(
            "/api/pose/drag/move",
            json={"joint_id": 4, "x": 50.0, "y": 60.0},
            headers=self.headers,
        )
        moved = resp.json()["keypoints"][4]
        self.assertEqual((moved["x"], moved["y"]), (50.0, 60.0))
        self.client.post("/api/pose/drag/end", headers=self.headers)
        undone = self.client.post("/api/pose/undo", headers=self.headers).json()
        self.assertEqual(undone["keypoints"], start["keypoints"])
        self.assertTrue(undone["can_redo"])

    def test_locked_joint_conflict(self):
        self.client.post("/api/pose/joints/2/lock", headers=self.headers)
        resp = self.client.post("/api/pose/drag/start", json={"joint_id": 2}, headers=self.headers)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["detail"], "joint_locked")

    def test_unknown_joint_404(self):
        resp = self.client.post("/api/pose/joints/42/visibility", headers=self.headers)
        self.assertEqual(resp.status_code, 404)

    def test_visibility_cascade(self):
        resp = self.client.post("/api/pose/joints/0/visibility", headers=self.headers)
        hidden = {kp["id"] for kp in resp.json()["keypoints"] if not kp["visible"]}
        self.assertEqual(hidden, {0, 14, 15, 16, 17})

    def test_constraint_and_transform(self):
        resp = self.client.post("/api/pose/constraints", json={"p1": 1, "p2": 2}, headers=self.headers)
        self.assertIn("1-2", resp.json()["constraints"])
        self.client.post("/api/pose/transform/start", headers=self.headers)
        resp = self.client.post(
            "/api/pose/transform/update",
            json={"rotate_deg": 30.0, "width_factor": 0.8},
            headers=self.headers,
        )
        self.assertTrue(resp.json()["transforming"])
        resp = self.client.post("/api/pose/transform/end", headers=self.headers)
        self.assertFalse(resp.json()["transforming"])

    def test_non_finite_numbers_rejected(self):
        headers = {**self.headers, "content-type": "application/json"}
        self.client.post("/api/pose/drag/start", json={"joint_id": 4}, headers=self.headers)
        resp = self.client.post("/api/pose/drag/move", content='{"joint_id": 4, "x": NaN, "y": 10}', headers=headers)
        self.assertEqual(resp.status_code, 422)
        self.client.post("/api/pose/scale/start", headers=self.headers)
        resp = self.client.post("/api/pose/scale/update", content='{"factor": Infinity}', headers=headers)
        self.assertEqual(resp.status_code, 422)
        resp = self.client.get("/api/pose", headers=self.headers)
        self.assertEqual(resp.status_code, 200)

    def test_flip_and_mirror_routes(self):
        for path in [
            "/api/pose/flip/horizontal",
            "/api/pose/flip/vertical",
            "/api/pose/mirror/left-to-right",
            "/api/pose/mirror/right-to-left",
        ]:
            self.assertEqual(self.client.post(path, headers=self.headers).status_code, 200)
        self.assertEqual(self.client.post("/api/pose/flip/diagonal", headers=self.headers).status_code, 422)

    def test_import_export(self):
        values = []
        for idx in range(25):
            values.extend([idx + 1.0, idx + 2.0, 1.0])
        resp = self.client.post(
            "/api/pose/import",
            json={"people": [{"pose_keypoints_2d": values}]},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["layout"], "body25")
        exported = self.client.get("/api/pose/export", headers=self.headers).json()
        self.assertEqual(exported["people"][0]["pose_keypoints_2d"][8 * 3], 10)

    def test_bad_import_400(self):
        resp = self.client.post("/api/pose/import", json={"people": []}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)

    def test_detect_failure_422(self):
        self.app.state.runtime.session.detector = lambda image, w, h: None
        resp = self.client.post("/api/pose/detect", content=b"not-an-image", headers=self.headers)
        self.assertEqual(resp.status_code, 422)

    def test_save_export(self):
        out_path = Path(self._tmp.name) / "exports" / "pose.json"
        self.app.state.runtime.config_store.config.export.pose_json_path = str(out_path)
        resp = self.client.post("/api/pose/export/save", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(out_path.exists())


if __name__ == "__main__":
    unittest.main()
