import unittest

import gdrivesync


class TestPublicApi(unittest.TestCase):
    def test_top_level_exports_exist(self) -> None:
        self.assertTrue(hasattr(gdrivesync, "GoogleDriveSync"))
        self.assertTrue(hasattr(gdrivesync, "GoogleDriveService"))
        self.assertTrue(hasattr(gdrivesync, "AuthInfo"))
        self.assertTrue(hasattr(gdrivesync, "OAuthClient"))

        self.assertTrue(hasattr(gdrivesync, "LocalFileTree"))
        self.assertTrue(hasattr(gdrivesync, "RemoteFileTree"))
        self.assertTrue(hasattr(gdrivesync, "IdPool"))
        self.assertTrue(hasattr(gdrivesync, "Backoff"))

        self.assertTrue(hasattr(gdrivesync, "GDriveSyncError"))
        self.assertTrue(hasattr(gdrivesync, "format_error_chain"))

    def test___all___is_defined(self) -> None:
        self.assertTrue(hasattr(gdrivesync, "__all__"))
        self.assertIn("GoogleDriveSync", gdrivesync.__all__)
        self.assertIn("GDriveSyncError", gdrivesync.__all__)
        for name in gdrivesync.__all__:
            self.assertTrue(hasattr(gdrivesync, name), name)


if __name__ == "__main__":
    unittest.main()
