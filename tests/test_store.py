"""
SponsorLink store and configuration tests.
"""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from sponsorlink import EnvironmentStore, JsonFileStore, MemoryStore
from sponsorlink import config
from sponsorlink.constants import ACCESS_TOKEN_VARIABLE, INSTALLATION_ID_VARIABLE, MANIFEST_VARIABLE


class StoreContract:
    """Behaviour shared by every store implementation."""

    def make_store(self):
        raise NotImplementedError

    def test_empty(self):
        store = self.make_store()
        self.assertIsNone(store.token)
        self.assertIsNone(store.salt)
        self.assertIsNone(store.access_token)

    def test_roundtrip(self):
        store = self.make_store()
        store.token = "token-value"
        store.salt = "salt-value"
        store.access_token = "access-value"
        self.assertEqual(store.token, "token-value")
        self.assertEqual(store.salt, "salt-value")
        self.assertEqual(store.access_token, "access-value")

    def test_none_removes(self):
        store = self.make_store()
        store.token = "token-value"
        store.token = None
        self.assertIsNone(store.token)
        self.assertIsNone(store.get(MANIFEST_VARIABLE))

    def test_empty_string_reads_as_absent(self):
        store = self.make_store()
        store.salt = ""
        self.assertIsNone(store.salt)

    def test_ensure_salt_generates_once(self):
        store = self.make_store()
        salt = store.ensure_salt()
        self.assertEqual(len(salt), 32)
        int(salt, 16)
        self.assertEqual(store.ensure_salt(), salt)
        self.assertEqual(store.salt, salt)

    def test_ensure_salt_keeps_existing(self):
        store = self.make_store()
        store.salt = "existing"
        self.assertEqual(store.ensure_salt(), "existing")


class TestMemoryStore(StoreContract, unittest.TestCase):

    def make_store(self):
        return MemoryStore()

    def test_initial_values(self):
        store = MemoryStore({MANIFEST_VARIABLE: "t", INSTALLATION_ID_VARIABLE: "s"})
        self.assertEqual((store.token, store.salt), ("t", "s"))

    def test_initial_values_copied(self):
        values = {MANIFEST_VARIABLE: "t"}
        store = MemoryStore(values)
        store.token = "changed"
        self.assertEqual(values[MANIFEST_VARIABLE], "t")


class TestEnvironmentStore(StoreContract, unittest.TestCase):

    def setUp(self):
        patcher = mock.patch.dict(os.environ, {}, clear=False)
        patcher.start()
        self.addCleanup(patcher.stop)
        for name in (MANIFEST_VARIABLE, INSTALLATION_ID_VARIABLE, ACCESS_TOKEN_VARIABLE):
            os.environ.pop(name, None)

    def make_store(self):
        return EnvironmentStore()

    def test_reads_process_environment(self):
        os.environ[MANIFEST_VARIABLE] = "from-env"
        self.assertEqual(EnvironmentStore().token, "from-env")

    def test_writes_process_environment(self):
        EnvironmentStore().salt = "written"
        self.assertEqual(os.environ[INSTALLATION_ID_VARIABLE], "written")


class TestJsonFileStore(StoreContract, unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmp, True)
        self.path = Path(self.tmp) / "nested" / "manifest.json"

    def make_store(self):
        return JsonFileStore(self.path)

    def test_missing_file_is_empty(self):
        self.assertFalse(self.path.exists())
        self.assertIsNone(JsonFileStore(self.path).token)

    def test_persisted_across_instances(self):
        JsonFileStore(self.path).token = "persisted"
        self.assertEqual(JsonFileStore(self.path).token, "persisted")
        with open(self.path, "r", encoding="utf-8") as f:
            self.assertEqual(json.load(f), {MANIFEST_VARIABLE: "persisted"})

    def test_sees_external_changes(self):
        store = JsonFileStore(self.path)
        store.token = "first"
        self.assertEqual(store.token, "first")

        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({MANIFEST_VARIABLE: "second"}, f)
        stat = os.stat(self.path)
        os.utime(self.path, (stat.st_atime, stat.st_mtime + 10))

        self.assertEqual(store.token, "second")

    def test_non_string_values_ignored(self):
        self.path.parent.mkdir(parents=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({MANIFEST_VARIABLE: 42, INSTALLATION_ID_VARIABLE: "salt"}, f)
        store = JsonFileStore(self.path)
        self.assertIsNone(store.token)
        self.assertEqual(store.salt, "salt")

    def test_non_object_rejected(self):
        self.path.parent.mkdir(parents=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(["not", "an", "object"], f)
        with self.assertRaises(ValueError):
            JsonFileStore(self.path).token


class TestConfig(unittest.TestCase):

    def test_default_store_env(self):
        with mock.patch.dict(os.environ, {"SPONSORLINK_STORE": "env"}):
            self.assertIsInstance(config.get_default_store(), EnvironmentStore)

    def test_default_store_file(self):
        with mock.patch.dict(os.environ, {"SPONSORLINK_STORE": "FILE", "SPONSORLINK_STORE_PATH": "/tmp/x.json"}):
            store = config.get_default_store()
        self.assertIsInstance(store, JsonFileStore)
        self.assertEqual(store.path, Path("/tmp/x.json"))

    def test_unknown_store(self):
        with mock.patch.dict(os.environ, {"SPONSORLINK_STORE": "redis"}):
            with self.assertRaises(ValueError):
                config.get_default_store()

    def test_public_key_override(self):
        with mock.patch.dict(os.environ, {"SPONSORLINK_PUBLIC_KEY": "  abc  "}):
            self.assertEqual(config.public_key_override(), "abc")
        with mock.patch.dict(os.environ, {"SPONSORLINK_PUBLIC_KEY": ""}):
            self.assertIsNone(config.public_key_override())

    def test_debug_flag(self):
        with mock.patch.dict(os.environ, {"SPONSORLINK_DEBUG": "true"}):
            self.assertTrue(config.is_debug())
        with mock.patch.dict(os.environ, {"SPONSORLINK_DEBUG": "0"}):
            self.assertFalse(config.is_debug())


if __name__ == "__main__":
    unittest.main()
