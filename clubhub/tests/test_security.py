import unittest

from clubhub.security import hash_password, verify_password


class PasswordHashingTests(unittest.TestCase):
    def test_hash_is_salted_and_irreversible(self):
        first = hash_password("p1")
        second = hash_password("p1")
        self.assertNotEqual(first, "p1")
        self.assertNotEqual(first, second)

    def test_verify(self):
        stored = hash_password("p1")
        self.assertTrue(verify_password("p1", stored))
        self.assertFalse(verify_password("p2", stored))

    def test_verify_rejects_unusable_hash(self):
        self.assertFalse(verify_password("p1", "p1"))
        self.assertFalse(verify_password("p1", ""))
        self.assertFalse(verify_password("p1", None))


if __name__ == "__main__":
    unittest.main()
