import pytest

from ringsig import ED25519, SECP256K1, Signature, generate, ring_signature
from ringsig.errors import PreconditionError, RandomnessError

def test_ring_signature_sign_and_verify(group, make_ring):
    ring, keys = make_ring(group)
    message = b"ring signature message"
    for index, key in enumerate(keys):
        signature = ring_signature.sign(message, ring, index, key)
        assert ring_signature.verify(message, ring, signature)


def test_ring_signature_two_member_ring(group, make_ring):
    ring, keys = make_ring(group, size=2)
    signature = ring_signature.sign(b"pair", ring, 0, keys[0])
    assert ring_signature.verify(b"pair", ring, signature)


def test_ring_closure_reproduces_stored_challenge(group, make_ring):
    ring, keys = make_ring(group, size=4)
    message = b"closure"
    signature = ring_signature.sign(message, ring, 2, keys[2])

    ee = signature.e
    for member, s_value in zip(ring, signature.s):
        commitment = group.point_add(
            group.base_mult(s_value), group.scalar_mult(ee, member.point)
        )
        ee = ring_signature.challenge(group, message, commitment)
    assert ee == signature.e


def test_ring_signature_rejects_reordered_ring(group, make_ring):
    ring, keys = make_ring(group)
    signature = ring_signature.sign(b"order", ring, 1, keys[1])
    reordered = [ring[1], ring[0], ring[2]]
    assert not ring_signature.verify(b"order", reordered, signature)

    # Even when the embedded ring is reordered too, the challenge chain breaks.
    forged = Signature(ring=tuple(reordered), e=signature.e, s=signature.s)
    assert not ring_signature.verify(b"order", reordered, forged)


def test_ring_signature_rejects_tampered_message(group, make_ring):
    ring, keys = make_ring(group)
    signature = ring_signature.sign(b"tamper", ring, 0, keys[0])
    assert not ring_signature.verify(b"tampeR", ring, signature)


@pytest.mark.parametrize("position", [0, 1, 2])
def test_ring_signature_rejects_tampered_response(group, position, make_ring):
    ring, keys = make_ring(group)
    signature = ring_signature.sign(b"tamper", ring, 0, keys[0])
    s_values = list(signature.s)
    s_values[position] ^= 1
    tampered = Signature(ring=signature.ring, e=signature.e, s=tuple(s_values))
    assert not ring_signature.verify(b"tamper", ring, tampered)


def test_ring_signature_rejects_tampered_challenge(group, make_ring):
    ring, keys = make_ring(group)
    signature = ring_signature.sign(b"tamper", ring, 1, keys[1])
    tampered = Signature(ring=signature.ring, e=signature.e ^ 1, s=signature.s)
    assert not ring_signature.verify(b"tamper", ring, tampered)


def test_ring_signature_rejects_substituted_member(group, make_ring):
    ring, keys = make_ring(group)
    signature = ring_signature.sign(b"tamper", ring, 1, keys[1])
    outsider, _ = generate(group=group)
    swapped = [ring[0], ring[1], outsider]
    forged = Signature(ring=tuple(swapped), e=signature.e, s=signature.s)
    assert not ring_signature.verify(b"tamper", swapped, forged)
    assert not ring_signature.verify(b"tamper", swapped, signature)


def test_ring_signature_rejects_length_mismatch(group, make_ring):
    ring, keys = make_ring(group)
    signature = ring_signature.sign(b"msg", ring, 0, keys[0])
    short = Signature(ring=signature.ring, e=signature.e, s=signature.s[:-1])
    assert not ring_signature.verify(b"msg", ring, short)
    longer = Signature(ring=signature.ring, e=signature.e, s=signature.s + (1,))
    assert not ring_signature.verify(b"msg", ring, longer)


def test_ring_signature_rejects_out_of_range_scalars(group, make_ring):
    ring, keys = make_ring(group)
    signature = ring_signature.sign(b"msg", ring, 0, keys[0])
    bad_e = Signature(ring=signature.ring, e=signature.e + group.order, s=signature.s)
    assert not ring_signature.verify(b"msg", ring, bad_e)
    bad_s = Signature(ring=signature.ring, e=signature.e, s=(-1,) + signature.s[1:])
    assert not ring_signature.verify(b"msg", ring, bad_s)


def test_ring_signature_rejects_malformed_inputs(group, make_ring):
    ring, keys = make_ring(group)
    signature = ring_signature.sign(b"msg", ring, 0, keys[0])
    assert not ring_signature.verify("msg", ring, signature)
    assert not ring_signature.verify(b"msg", ring, {"c0": signature.e, "s": list(signature.s)})
    assert not ring_signature.verify(b"msg", [], signature)


def test_ring_signature_requires_multiple_members(group):
    public_key, private_key = generate(group=group)
    with pytest.raises(PreconditionError):
        ring_signature.sign(b"msg", [public_key], 0, private_key)


@pytest.mark.parametrize("index", [-1, 3, 5])
def test_ring_signature_validates_signer_index(group, index, make_ring):
    ring, keys = make_ring(group)
    with pytest.raises(ValueError):
        ring_signature.sign(b"msg", ring, index, keys[0])


def test_ring_signature_rejects_mismatched_private_key(group, make_ring):
    ring, keys = make_ring(group)
    with pytest.raises(PreconditionError):
        ring_signature.sign(b"msg", ring, 0, keys[1])


def test_ring_signature_rejects_mixed_groups():
    ed_public, ed_private = generate(group=ED25519)
    secp_public, _ = generate(group=SECP256K1)
    with pytest.raises(PreconditionError):
        ring_signature.sign(b"msg", [ed_public, secp_public], 0, ed_private)


def test_ring_signature_requires_bytes_message(group, make_ring):
    ring, keys = make_ring(group)
    with pytest.raises(TypeError):
        ring_signature.sign("not-bytes", ring, 0, keys[0])


def test_ring_signature_propagates_randomness_failure(group, make_ring):
    ring, keys = make_ring(group)

    def exhausted(size):
        raise OSError("no entropy")

    with pytest.raises(RandomnessError):
        ring_signature.sign(b"msg", ring, 0, keys[0], rand=exhausted)


def test_signing_twice_gives_distinct_valid_signatures(group, make_ring):
    ring, keys = make_ring(group)
    first = ring_signature.sign(b"again", ring, 2, keys[2])
    second = ring_signature.sign(b"again", ring, 2, keys[2])
    assert first != second
    assert ring_signature.verify(b"again", ring, first)
    assert ring_signature.verify(b"again", ring, second)


def test_signing_is_reproducible_with_seeded_source(group, seeded, make_ring):
    ring, keys = make_ring(group)
    first = ring_signature.sign(b"seeded", ring, 1, keys[1], rand=seeded(b"nonce"))
    second = ring_signature.sign(b"seeded", ring, 1, keys[1], rand=seeded(b"nonce"))
    assert first == second


def test_verification_is_deterministic(group, make_ring):
    ring, keys = make_ring(group)
    signature = ring_signature.sign(b"stable", ring, 0, keys[0])
    results = {ring_signature.verify(b"stable", ring, signature) for _ in range(3)}
    assert results == {True}
    results = {ring_signature.verify(b"unstable", ring, signature) for _ in range(3)}
    assert results == {False}


def test_signature_layout_does_not_depend_on_signer(group, make_ring):
    ring, keys = make_ring(group, size=5)
    signatures = [
        ring_signature.sign(b"anon", ring, index, key) for index, key in enumerate(keys)
    ]
    for signature in signatures:
        assert signature.ring == tuple(ring)
        assert len(signature.s) == len(ring)
        assert 0 <= signature.e < group.order
        assert all(0 < value < group.order for value in signature.s)
        assert not hasattr(signature, "signer_index")
    assert len({signature.e for signature in signatures}) == len(signatures)


def test_challenge_depends_on_message_and_point(group):
    point = group.base_mult(9)
    base = ring_signature.challenge(group, b"m", point)
    assert base == ring_signature.challenge(group, b"m", point)
    assert base != ring_signature.challenge(group, b"n", point)
    assert base != ring_signature.challenge(group, b"m", group.base_mult(10))


def test_signing_on_unhardened_group_logs_a_warning(caplog, make_ring):
    ring, keys = make_ring(SECP256K1)
    with caplog.at_level("WARNING", logger="ringsig"):
        ring_signature.sign(b"warn", ring, 0, keys[0])
    assert any("not constant time" in record.getMessage() for record in caplog.records)


def test_signing_on_ed25519_does_not_warn(caplog, make_ring):
    ring, keys = make_ring(ED25519)
    with caplog.at_level("WARNING", logger="ringsig"):
        ring_signature.sign(b"quiet", ring, 0, keys[0])
    assert not any("not constant time" in record.getMessage() for record in caplog.records)
