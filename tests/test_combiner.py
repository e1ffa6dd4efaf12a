import random
import threading
import zlib

import pytest

from filecompare.core.combiner import DigestCombiner, EMPTY_DIGEST, FileDigest, combine_digests
from filecompare.core.errors import IncompleteDigestError
from filecompare.core.hasher import ChunkDigest, digest_chunk, file_crc32, hash_chunk


def test_hash_chunk_is_crc32():
    assert hash_chunk(b"") == 0
    assert hash_chunk(b"123456789") == 0xCBF43926
    assert digest_chunk(3, b"123456789") == ChunkDigest(3, 0xCBF43926)


def test_file_crc32_matches_zlib(tmp_path):
    f = tmp_path / "dados.bin"
    data = bytes(range(256)) * 100
    f.write_bytes(data)
    assert file_crc32(f) == zlib.crc32(data)


def test_combine_folds_little_endian_in_index_order():
    values = [0x11223344, 0xCBF43926, 0x00000001]
    expected = zlib.crc32(b"".join(v.to_bytes(4, "little") for v in values))

    digests = [ChunkDigest(i, v) for i, v in enumerate(values)]
    random.Random(7).shuffle(digests)

    assert combine_digests(digests, len(values)) == expected


def test_combine_is_order_sensitive():
    a = combine_digests([ChunkDigest(0, 1), ChunkDigest(1, 2)], 2)
    b = combine_digests([ChunkDigest(0, 2), ChunkDigest(1, 1)], 2)
    assert a != b


def test_empty_file_digest_is_identity():
    combiner = DigestCombiner(0)
    assert combiner.complete
    assert combiner.combine() == EMPTY_DIGEST
    assert FileDigest(EMPTY_DIGEST, 0, 0).hexdigest() == "00000000"


def test_combine_requires_every_chunk():
    combiner = DigestCombiner(3)
    combiner.add(ChunkDigest(0, 5))
    combiner.add(ChunkDigest(2, 6))
    with pytest.raises(IncompleteDigestError) as info:
        combiner.combine()
    assert info.value.missing == [1]
    assert combiner.missing() == [1]
    assert not combiner.wait_complete(timeout=0.05)


def test_add_rejects_duplicates_and_out_of_range():
    combiner = DigestCombiner(2)
    combiner.add(ChunkDigest(0, 1))
    with pytest.raises(ValueError):
        combiner.add(ChunkDigest(0, 1))
    with pytest.raises(ValueError):
        combiner.add(ChunkDigest(2, 1))
    with pytest.raises(ValueError):
        combiner.add(ChunkDigest(-1, 1))


def test_concurrent_adds_any_order():
    n = 200
    values = [hash_chunk(i.to_bytes(4, "big")) for i in range(n)]
    combiner = DigestCombiner(n)
    order = list(range(n))
    random.Random(1).shuffle(order)

    threads = [
        threading.Thread(target=combiner.add, args=(ChunkDigest(i, values[i]),))
        for i in order
    ]
    for t in threads:
        t.start()
    assert combiner.wait_complete(timeout=5)
    for t in threads:
        t.join()

    assert combiner.filled == n
    assert combiner.combine() == combine_digests(
        [ChunkDigest(i, v) for i, v in enumerate(values)], n
    )


def test_file_digest_hex():
    d = FileDigest(0xABC, 10, 1)
    assert d.hexdigest() == "00000abc"
    assert str(d) == "00000abc"
