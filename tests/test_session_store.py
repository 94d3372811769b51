"""Tests de persistencia de la sesion de autenticacion."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from cliente.backend.session_store import AuthSessionStore
from shared.protocol import User


class AuthSessionStoreTests(unittest.TestCase):
    """Valida guardado, restauracion y cierre de sesion."""

    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self._temp_dir.cleanup)
        self.storage_path = Path(self._temp_dir.name) / "data" / "auth-storage.json"

    def test_set_auth_persists_state_layout(self) -> None:
        """El archivo guarda usuario, token y bandera de autenticacion."""
        store = AuthSessionStore(self.storage_path)

        store.set_auth(User(id=1, full_name="Ana Pérez", role="admin", branch_id=2), "tok")

        data = json.loads(self.storage_path.read_text(encoding="utf-8"))
        self.assertEqual(data["version"], 0)
        self.assertEqual(data["state"]["token"], "tok")
        self.assertTrue(data["state"]["isAuthenticated"])
        self.assertEqual(data["state"]["user"]["full_name"], "Ana Pérez")

    def test_session_is_restored_on_startup(self) -> None:
        """Una nueva instancia recupera la sesion persistida."""
        AuthSessionStore(self.storage_path).set_auth(
            User(id=1, full_name="Ana Pérez", role="admin"),
            "tok",
        )

        restored = AuthSessionStore(self.storage_path)

        self.assertTrue(restored.is_authenticated)
        self.assertEqual(restored.token, "tok")
        self.assertEqual(restored.user.first_name, "Ana")

    def test_logout_clears_memory_and_file(self) -> None:
        """Cerrar sesion borra el estado y el archivo."""
        store = AuthSessionStore(self.storage_path)
        store.set_auth(User(id=1, full_name="Ana", role="admin"), "tok")

        store.logout()

        self.assertFalse(store.is_authenticated)
        self.assertIsNone(store.token)
        self.assertIsNone(store.user)
        self.assertFalse(self.storage_path.exists())

    def test_logout_without_file_is_noop(self) -> None:
        """Cerrar sesion sin archivo persistido no falla."""
        store = AuthSessionStore(self.storage_path)

        store.logout()

        self.assertFalse(store.is_authenticated)

    def test_invalid_file_is_ignored(self) -> None:
        """Un archivo corrupto deja la sesion cerrada."""
        self.storage_path.parent.mkdir(parents=True)
        self.storage_path.write_text("{no es json", encoding="utf-8")

        store = AuthSessionStore(self.storage_path)

        self.assertFalse(store.is_authenticated)
        self.assertIsNone(store.token)


if __name__ == "__main__":
    unittest.main()
