import io
from dataclasses import dataclass, field

from distlab import labgob


@dataclass
class T1:
    t1int0: int = 0
    t1int1: int = 0
    t1string0: str = ""
    t1string1: str = ""


@dataclass
class T2:
    t2slice: list = field(default_factory=list)
    t2map: dict = field(default_factory=dict)
    t2t3: object = None


@dataclass
class T3:
    t3int999: int = 0


@dataclass(frozen=True)
class T4:
    yes: int = 0
    _no: int = 0


@dataclass
class DD:
    x: int = 0


def test_gob_round_trip():
    e0 = labgob.error_count()
    buf = io.BytesIO()
    labgob.register(T3())
    t1 = T1(t1int1=1, t1string1="6.5840")
    t2 = T2(t2slice=[T1(), t1], t2map={99: T1(1, 2, "x", "y")}, t2t3=T3(999))
    enc = labgob.LabEncoder(buf)
    for v in (0, 1, t1, t2):
        enc.encode(v)

    dec = labgob.LabDecoder(io.BytesIO(buf.getvalue()))
    x0 = dec.decode()
    x1 = dec.decode()
    r1 = dec.decode(T1())
    r2 = dec.decode(T2())
    assert x0 == 0
    assert x1 == 1
    assert r1.t1int0 == 0
    assert r1.t1int1 == 1
    assert r1.t1string0 == ""
    assert r1.t1string1 == "6.5840"
    assert len(r2.t2slice) == 2
    assert r2.t2slice[1].t1int1 == 1
    assert len(r2.t2map) == 1
    assert r2.t2map[99].t1string1 == "y"
    assert r2.t2t3.t3int999 == 999
    assert labgob.error_count() == e0


def test_capital_warns_once():
    e0 = labgob.error_count()
    buf = io.BytesIO()
    enc = labgob.LabEncoder(buf)
    enc.encode([{T4(1, 2): 5}])
    assert labgob.error_count() == e0 + 1
    enc.encode([{T4(3, 4): 6}])
    assert labgob.error_count() == e0 + 1
    dec = labgob.LabDecoder(io.BytesIO(buf.getvalue()))
    assert dec.decode() == [{T4(1, 2): 5}]


def test_default_warns():
    e0 = labgob.error_count()
    buf = io.BytesIO()
    labgob.LabEncoder(buf).encode(DD())
    reply = DD(99)
    out = labgob.LabDecoder(io.BytesIO(buf.getvalue())).decode(reply)
    assert labgob.error_count() == e0 + 1
    assert out is reply and reply.x == 0


def test_decode_past_end_raises():
    dec = labgob.LabDecoder(io.BytesIO(b""))
    try:
        dec.decode()
    except EOFError:
        pass
    else:
        raise AssertionError("expected EOFError")