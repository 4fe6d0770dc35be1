from pathlib import Path

from upspatch.patching import Direction, PatchMatcher
from upspatch.patching.builder import build


def test_matches_forward_and_reverse(tmp_path: Path) -> None:
    original = b"\x10" * 512
    modified = b"\x10" * 100 + b"\x99" * 12 + b"\x10" * 400
    other_modified = b"\x20" * 64

    (tmp_path / "game.sfc").write_bytes(original)
    (tmp_path / "hack.ups").write_bytes(build(original, modified))

    (tmp_path / "other_hacked.gba").write_bytes(other_modified)
    (tmp_path / "undo.ups").write_bytes(build(b"\x30" * 64, other_modified))

    report = PatchMatcher().scan(tmp_path)

    by_patch = {match.patch_path.name: match for match in report.matches}
    assert set(by_patch) == {"hack.ups", "undo.ups"}

    hack = by_patch["hack.ups"]
    assert hack.rom_path == tmp_path / "game.sfc"
    assert hack.direction is Direction.FORWARD
    assert hack.target_path == tmp_path / "hack.sfc"

    undo = by_patch["undo.ups"]
    assert undo.rom_path == tmp_path / "other_hacked.gba"
    assert undo.direction is Direction.REVERSE
    assert undo.target_path == tmp_path / "undo.gba"

    assert report.unmatched == []
    assert report.invalid == []


def test_reports_unmatched_and_invalid_patches(tmp_path: Path) -> None:
    (tmp_path / "game.nes").write_bytes(b"NES\x1a" + b"\x00" * 60)
    (tmp_path / "orphan.ups").write_bytes(build(b"abc", b"abd"))
    (tmp_path / "broken.ups").write_bytes(b"not a patch at all")

    report = PatchMatcher().scan(tmp_path)

    assert report.matches == []
    assert [header.path.name for header in report.unmatched] == ["orphan.ups"]
    assert report.invalid == [tmp_path / "broken.ups"]


def test_ignores_files_without_rom_extension(tmp_path: Path) -> None:
    original = b"data" * 32
    (tmp_path / "notes.txt").write_bytes(original)
    (tmp_path / "hack.ups").write_bytes(build(original, original + b"!"))

    report = PatchMatcher().scan(tmp_path)
    assert report.matches == []
    assert len(report.unmatched) == 1

    report = PatchMatcher(rom_extensions={"txt"}).scan(tmp_path)
    assert len(report.matches) == 1
    assert report.matches[0].direction is Direction.FORWARD
