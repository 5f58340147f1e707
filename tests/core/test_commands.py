import sys
import pytest
from PyQt6.QtWidgets import QApplication

@pytest.fixture(scope="module")
def app():
    return QApplication.instance() or QApplication(sys.argv)


from core.commands import (
    convert_bulk, dump_voices, extract_voices, generate_cartridge, generate_default_voice,
    generate_random_voice, list_voice_names,
)
from core.config import AppConfig
from core.errors import FormatError, RangeError
from core.logger import AppLogger
from midi.sysex import build_cartridge_dump, parse_cartridge_dump, parse_voice_dump
from model.cartridge import Cartridge
from model.generate import CartridgeMode, RandomScope
from model.presets import brass1, default_voice


@pytest.fixture
def config(tmp_path):
    cfg = AppConfig(path=tmp_path / "config.json")
    cfg.random_seed = 7
    return cfg


@pytest.fixture
def logger(app):
    logger = AppLogger()
    logger.received = []
    logger.message_logged.connect(lambda cat, msg: logger.received.append((cat, msg)))
    return logger


def _brass_dump():
    cart = Cartridge.filled(default_voice()).replace_voice(0, brass1())
    return build_cartridge_dump(cart)


def test_generate_default_voice(config, logger):
    msg = generate_default_voice(config=config, logger=logger)
    assert len(msg) == 163
    assert parse_voice_dump(msg) == default_voice()
    assert logger.received[0][0] == "GENERATE"


def test_generate_default_voice_packed(config, logger):
    config.single_voice_format = "packed"
    msg = generate_default_voice(config=config, logger=logger)
    assert len(msg) == 136
    assert msg[4:6] == bytes([0x01, 0x00])


def test_generate_default_voice_uses_configured_channel(config, logger):
    config.midi_channel = 4
    assert generate_default_voice(config=config, logger=logger)[2] == 0x03


def test_generate_random_voice_is_seeded(config, logger):
    a = generate_random_voice(RandomScope.METRIC, config=config, logger=logger)
    b = generate_random_voice(RandomScope.METRIC, config=config, logger=logger)
    assert a == b
    assert parse_voice_dump(a).name == default_voice().name


def test_generate_random_voice_keeps_base_outside_scope(config, logger):
    msg = generate_random_voice(RandomScope.LFO, base=brass1(), config=config, logger=logger)
    voice = parse_voice_dump(msg)
    assert voice.operators() == brass1().operators()
    assert voice.algorithm == brass1().algorithm


def test_generate_cartridge_repeat(config, logger):
    msg = generate_cartridge(CartridgeMode.REPEAT, voice=brass1(), config=config, logger=logger)
    assert len(msg) == 4104
    cart = parse_cartridge_dump(msg)
    assert all(v == brass1() for v in cart)


def test_generate_cartridge_vary_from_config(config, logger):
    cart = parse_cartridge_dump(generate_cartridge(config=config, logger=logger))
    assert len(set(cart.voices)) > 1
    assert any("vary" in msg for _, msg in logger.received)


def test_convert_bulk_hands_plain_values_to_exporter(logger):
    exported = []
    result = convert_bulk(_brass_dump(), lambda doc: exported.append(doc) or "ok", logger)
    assert result == "ok"
    doc = exported[0]
    assert len(doc["voices"]) == 32
    assert doc["voices"][0]["name"] == "BRASS   1 "
    assert doc["voices"][0]["algorithm"] == 22
    assert doc["voices"][0]["operators"][0]["output_level"] == 98


def test_convert_bulk_rejects_bad_checksum(logger):
    msg = bytearray(_brass_dump())
    msg[-2] ^= 0x01
    with pytest.raises(FormatError):
        convert_bulk(bytes(msg), lambda doc: doc, logger)
    assert [cat for cat, _ in logger.received].count("SYSEX") == 2


def test_list_voice_names(logger):
    names = list_voice_names(_brass_dump(), logger)
    assert names[0] == "BRASS   1 "
    assert names[1:] == ["INIT VOICE"] * 31


def test_list_voice_names_tolerates_bad_checksum(logger):
    msg = bytearray(_brass_dump())
    msg[-2] ^= 0x01
    assert list_voice_names(bytes(msg), logger)[0] == "BRASS   1 "


def test_extract_voices(config, logger):
    dumps = extract_voices(_brass_dump(), config, logger)
    assert len(dumps) == 32
    assert parse_voice_dump(dumps[0]) == brass1()
    assert all(len(d) == 163 for d in dumps)


def test_list_voice_names_rejects_single_voice_dump(logger):
    from midi.sysex import build_voice_dump
    with pytest.raises(FormatError):
        list_voice_names(build_voice_dump(brass1()), logger)


def test_generate_default_voice_with_name(config, logger):
    msg = generate_default_voice("E.PIANO 1", config=config, logger=logger)
    assert str(parse_voice_dump(msg).name) == "E.PIANO 1 "


def test_voice_name_follows_configured_policy(config, logger):
    msg = generate_default_voice("BAD\tNAME", config=config, logger=logger)
    assert str(parse_voice_dump(msg).name) == "BAD NAME  "
    config.range_policy = "reject"
    with pytest.raises(RangeError):
        generate_default_voice("BAD\tNAME", config=config, logger=logger)
    with pytest.raises(RangeError):
        generate_random_voice(RandomScope.LFO, name="BAD\tNAME", config=config, logger=logger)


def test_generate_random_voice_with_name(config, logger):
    msg = generate_random_voice(RandomScope.ALL, name="RANDOM 1", config=config, logger=logger)
    assert str(parse_voice_dump(msg).name) == "RANDOM 1  "


def test_dump_one_voice(logger):
    text = dump_voices(_brass_dump(), 1, logger)
    assert text.startswith("==========\nBRASS   1 \n==========\n")
    assert "OP1: EG: R1=72 L1=99 R2=76 L2=88 R3=99 L3=96 R4=71 L4=0" in text
    assert "ALG: 22, feedback = 7, osc sync = on" in text
    assert "wave = Sine" in text
    assert "Transpose: +0" in text
    assert "INIT VOICE" in dump_voices(_brass_dump(), 32, logger)


def test_dump_all_voices(logger):
    text = dump_voices(_brass_dump(), logger=logger)
    assert text.startswith("VOICE 1: ==========\nBRASS   1 ")
    assert "VOICE 32: ==========\nINIT VOICE" in text
    assert text.count("OP6: ") == 32


def test_dump_single_voice_message(logger):
    from midi.sysex import build_voice_dump
    assert str(brass1()) == dump_voices(build_voice_dump(brass1(), packed=True), 5, logger)


def test_dump_voice_number_out_of_range(logger):
    with pytest.raises(RangeError):
        dump_voices(_brass_dump(), 0, logger)
    with pytest.raises(RangeError):
        dump_voices(_brass_dump(), 33, logger)


def test_dump_rejects_bad_checksum(logger):
    msg = bytearray(_brass_dump())
    msg[-2] ^= 0x01
    with pytest.raises(FormatError):
        dump_voices(bytes(msg), 1, logger)
