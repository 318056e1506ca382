import attr

from pstcodec.derivation import (Bip32Derivation, TaprootBip32Derivation,
                                 sort_bip32_derivations, sort_tap_bip32_derivations)
from pstcodec.serialization import MalformedValue
from pstcodec.util import bfh

from . import PSTTestCase


PUBKEY_A = bfh("02" + "aa" * 32)
PUBKEY_B = bfh("03" + "bb" * 32)
XONLY_A = bytes([0x11]) * 32
XONLY_B = bytes([0x22]) * 32
XFP = bfh("deadbeef")


class TestBip32Derivation(PSTTestCase):

    def test_construct(self):
        d = Bip32Derivation(pubkey=PUBKEY_A.hex(), fingerprint="deadbeef", path=[0x80000054, 0])
        self.assertEqual(PUBKEY_A, d.pubkey)
        self.assertEqual(XFP, d.fingerprint)
        self.assertEqual((0x80000054, 0), d.path)

    def test_construct_from_path_string(self):
        d = Bip32Derivation(pubkey=PUBKEY_A, fingerprint=XFP, path="m/84'/0'/0'/1/7")
        self.assertEqual((0x80000054, 0x80000000, 0x80000000, 1, 7), d.path)
        self.assertEqual(Bip32Derivation(pubkey=PUBKEY_A, fingerprint=XFP,
                                         path=[0x80000054, 0x80000000, 0x80000000, 1, 7]), d)
        t = TaprootBip32Derivation(xonly_pubkey=XONLY_A, fingerprint=XFP, path="m/86h/0h")
        self.assertEqual((0x80000056, 0x80000000), t.path)
        with self.assertRaises(ValueError):
            Bip32Derivation(pubkey=PUBKEY_A, fingerprint=XFP, path="m/84'/x")

    def test_equality_and_hash(self):
        d1 = Bip32Derivation(pubkey=PUBKEY_A, fingerprint=XFP, path=[1, 2])
        d2 = Bip32Derivation(pubkey=PUBKEY_A, fingerprint=XFP, path=(1, 2))
        self.assertEqual(d1, d2)
        self.assertEqual(hash(d1), hash(d2))

    def test_frozen(self):
        d = Bip32Derivation(pubkey=PUBKEY_A, fingerprint=XFP, path=[])
        with self.assertRaises(attr.exceptions.FrozenInstanceError):
            d.path = (1,)

    def test_rejects_invalid_fields(self):
        with self.assertRaises(ValueError):
            Bip32Derivation(pubkey=XONLY_A, fingerprint=XFP, path=[])
        with self.assertRaises(ValueError):
            Bip32Derivation(pubkey=PUBKEY_A, fingerprint=bfh("dead"), path=[])
        with self.assertRaises(ValueError):
            Bip32Derivation(pubkey=PUBKEY_A, fingerprint=XFP, path=[1 << 32])

    def test_pst_value(self):
        val = bfh("deadbeef" "54000080" "00000000")
        d = Bip32Derivation.from_pst_kv(PUBKEY_A, val)
        self.assertEqual((0x80000054, 0), d.path)
        self.assertEqual(val, d.to_pst_value())
        with self.assertRaises(MalformedValue):
            Bip32Derivation.from_pst_kv(PUBKEY_A, bfh("deadbeef00"))

    def test_to_json(self):
        d = Bip32Derivation(pubkey=PUBKEY_A, fingerprint=XFP, path=[0x80000054, 0x80000000, 0x80000000, 1, 7])
        self.assertEqual({'pubkey': PUBKEY_A.hex(), 'fingerprint': 'deadbeef', 'path': "m/84'/0'/0'/1/7"},
                         d.to_json())

    def test_sort_by_pubkey(self):
        d_a = Bip32Derivation(pubkey=PUBKEY_A, fingerprint=XFP, path=[9])
        d_b = Bip32Derivation(pubkey=PUBKEY_B, fingerprint=XFP, path=[1])
        entries = [d_b, d_a]
        self.assertEqual([d_a, d_b], sort_bip32_derivations(entries))
        # input untouched
        self.assertEqual([d_b, d_a], entries)


class TestTaprootBip32Derivation(PSTTestCase):

    def test_construct(self):
        d = TaprootBip32Derivation(xonly_pubkey=XONLY_A, leaf_hashes=["33" * 32], fingerprint=XFP, path=[1])
        self.assertEqual((bytes([0x33]) * 32,), d.leaf_hashes)
        self.assertEqual((1,), d.path)
        d = TaprootBip32Derivation(xonly_pubkey=XONLY_A, fingerprint=XFP, path=[])
        self.assertEqual((), d.leaf_hashes)

    def test_rejects_invalid_fields(self):
        with self.assertRaises(ValueError):
            TaprootBip32Derivation(xonly_pubkey=PUBKEY_A, fingerprint=XFP, path=[])
        with self.assertRaises(ValueError):
            TaprootBip32Derivation(xonly_pubkey=XONLY_A, leaf_hashes=[bytes(31)], fingerprint=XFP, path=[])
        with self.assertRaises(ValueError):
            TaprootBip32Derivation(xonly_pubkey=XONLY_A, fingerprint=bfh("00"), path=[])

    def test_pst_value(self):
        val = bfh("01") + bytes([0x33]) * 32 + bfh("deadbeef" "56000080")
        d = TaprootBip32Derivation.from_pst_kv(XONLY_B, val)
        self.assertEqual(XONLY_B, d.xonly_pubkey)
        self.assertEqual((bytes([0x33]) * 32,), d.leaf_hashes)
        self.assertEqual((0x80000056,), d.path)
        self.assertEqual(val, d.to_pst_value())

    def test_sort_before(self):
        d_a = TaprootBip32Derivation(xonly_pubkey=XONLY_A, fingerprint=XFP, path=[5])
        d_b = TaprootBip32Derivation(xonly_pubkey=XONLY_B, fingerprint=XFP, path=[1])
        self.assertTrue(d_a.sort_before(d_b))
        self.assertFalse(d_b.sort_before(d_a))
        self.assertFalse(d_a.sort_before(d_a))
        self.assertEqual([d_a, d_b], sort_tap_bip32_derivations([d_b, d_a]))

    def test_sorting_follows_sort_before(self):
        class ReverseOrder(TaprootBip32Derivation):
            def sort_before(self, other):
                return other.sort_key() < self.sort_key()

        d_a = ReverseOrder(xonly_pubkey=XONLY_A, fingerprint=XFP, path=[5])
        d_b = ReverseOrder(xonly_pubkey=XONLY_B, fingerprint=XFP, path=[1])
        self.assertEqual([d_b, d_a], sort_tap_bip32_derivations([d_a, d_b]))

    def test_to_json(self):
        d = TaprootBip32Derivation(xonly_pubkey=XONLY_A, leaf_hashes=[bytes(32)], fingerprint=XFP,
                                   path=[0x80000056])
        self.assertEqual({'xonly_pubkey': XONLY_A.hex(),
                          'leaf_hashes': ["00" * 32],
                          'fingerprint': 'deadbeef',
                          'path': "m/86'"},
                         d.to_json())
