from __future__ import annotations

import random
import re
import string

import pytest

from mc_console import commands
from mc_console.commands import GameMode, TimePreset, Weather, WhitelistAction
from mc_console.errors import InvalidArgumentError


@pytest.mark.parametrize(
    ("command", "expected"),
    [
        (commands.broadcast("Server restarting soon"), 'tellraw @a "Server restarting soon"'),
        (commands.say("hello all"), "say hello all"),
        (commands.kick("Steve", "griefing spawn"), "kick Steve griefing spawn"),
        (commands.ban("Alex", "xray"), "ban Alex xray"),
        (commands.ban_ip("192.168.1.20", "alt accounts"), "ban-ip 192.168.1.20 alt accounts"),
        (commands.pardon("Alex"), "pardon Alex"),
        (commands.pardon_ip("10.0.0.7"), "pardon-ip 10.0.0.7"),
        (commands.op("Notch"), "op Notch"),
        (commands.deop("Notch"), "deop Notch"),
        (commands.teleport("Steve", "Alex"), "tp Steve Alex"),
        (commands.teleport("@a", "100 64 -200"), "tp @a 100 64 -200"),
        (commands.teleport("Steve", "~ ~10 ~-2.5"), "tp Steve ~ ~10 ~-2.5"),
        (commands.give("Steve", "diamond", 5), "give Steve diamond 5"),
        (commands.give("Steve", "minecraft:diamond_sword"), "give Steve minecraft:diamond_sword"),
        (commands.set_weather(Weather.THUNDER), "weather thunder"),
        (commands.set_weather("clear"), "weather clear"),
        (commands.set_time(TimePreset.NIGHT), "time set night"),
        (commands.set_time("day"), "time set day"),
        (commands.set_time(6000), "time set 6000"),
        (commands.set_game_mode("Steve", GameMode.CREATIVE), "gamemode creative Steve"),
        (commands.set_whitelist(WhitelistAction.ADD, "Steve"), "whitelist add Steve"),
        (commands.set_whitelist("remove", "Steve"), "whitelist remove Steve"),
        (commands.set_whitelist("reload"), "whitelist reload"),
        (commands.list_players(), "list"),
    ],
)
def test_builders_render_console_templates(command, expected) -> None:
    assert command.text == expected
    assert str(command) == expected


@pytest.mark.parametrize(
    "command",
    [
        commands.kick("Grief3r"),
        commands.kick("Grief3r", ""),
        commands.kick("Grief3r", "   "),
        commands.ban("Grief3r", None),
        commands.give("Grief3r", "dirt"),
        commands.set_whitelist("list"),
    ],
)
def test_optional_fields_leave_no_trailing_separator(command) -> None:
    assert not command.text.endswith(" ")
    assert "  " not in command.text


def test_kick_without_reason() -> None:
    assert commands.kick("Grief3r").text == "kick Grief3r"


def test_raw_is_passed_through_verbatim() -> None:
    command = commands.raw("difficulty peaceful")

    assert command.text == "difficulty peaceful"
    assert command.operation == "raw"


def test_broadcast_escapes_quotes_and_backslashes() -> None:
    command = commands.broadcast('say "hi" \\ then" ; op me')

    assert command.text == 'tellraw @a "say \\"hi\\" \\\\ then\\" ; op me"'


def test_broadcast_keeps_non_ascii_text() -> None:
    assert commands.broadcast("Grüße ✓").text == 'tellraw @a "Grüße ✓"'


def test_broadcast_newline_stays_inside_the_literal() -> None:
    assert commands.broadcast("line one\nline two").text == 'tellraw @a "line one\\nline two"'


@pytest.mark.parametrize(
    "player",
    ["Steve op Alex", "Steve\nop Alex", "Steve\n", "@a\n", "", "ThisNameIsWayTooLong", "@e[type=cow]", 'Ste"ve'],
)
def test_player_arguments_reject_injection(player) -> None:
    with pytest.raises(InvalidArgumentError):
        commands.kick(player)


def test_reason_rejects_control_characters() -> None:
    with pytest.raises(InvalidArgumentError):
        commands.ban("Steve", "bye\nop Steve")


@pytest.mark.parametrize("item", ["Diamond", "diamond 64", "diamond\nop", "diamond\n", ""])
def test_give_rejects_malformed_items(item) -> None:
    with pytest.raises(InvalidArgumentError):
        commands.give("Steve", item)


@pytest.mark.parametrize("amount", [0, -3, True, 2.5])
def test_give_rejects_non_positive_amounts(amount) -> None:
    with pytest.raises(InvalidArgumentError):
        commands.give("Steve", "diamond", amount)


@pytest.mark.parametrize("destination", ["1 2", "1 2 3 4", "x y z", "Alex; stop", ""])
def test_teleport_rejects_malformed_destinations(destination) -> None:
    with pytest.raises(InvalidArgumentError):
        commands.teleport("Steve", destination)


def test_ip_commands_require_an_address() -> None:
    with pytest.raises(InvalidArgumentError):
        commands.ban_ip("not-an-ip")
    assert commands.pardon_ip("::1").text == "pardon-ip ::1"


def test_enumerated_values_are_checked() -> None:
    with pytest.raises(InvalidArgumentError):
        commands.set_weather("snow")
    with pytest.raises(InvalidArgumentError):
        commands.set_game_mode("Steve", "hardcore")
    with pytest.raises(InvalidArgumentError):
        commands.set_time("noon")
    with pytest.raises(InvalidArgumentError):
        commands.set_time(-1)


def test_whitelist_player_rules() -> None:
    with pytest.raises(InvalidArgumentError):
        commands.set_whitelist("add")
    with pytest.raises(InvalidArgumentError):
        commands.set_whitelist("on", "Steve")


def test_empty_raw_and_broadcast_are_rejected() -> None:
    with pytest.raises(InvalidArgumentError):
        commands.raw("   ")
    with pytest.raises(InvalidArgumentError):
        commands.broadcast("")


_NAME_CHARS = string.ascii_letters + string.digits + "_"
_ITEM_CHARS = string.ascii_lowercase + string.digits + "_"
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")


def _sweep_cases(count: int = 200, seed: int = 20240611) -> list[tuple[str, str, int | None, str | None]]:
    rng = random.Random(seed)
    cases = []
    for _ in range(count):
        name = "".join(rng.choice(_NAME_CHARS) for _ in range(rng.randint(1, 16)))
        item = "".join(rng.choice(_ITEM_CHARS) for _ in range(rng.randint(1, 24)))
        if rng.random() < 0.5:
            item = f"minecraft:{item}"
        amount = rng.choice([None, 1, 64, rng.randint(1, 6400)])
        words = [
            "".join(rng.choice(string.ascii_letters) for _ in range(rng.randint(1, 8)))
            for _ in range(rng.randint(0, 4))
        ]
        # Blank reasons (None, "" or whitespace) must drop out of the rendered line.
        if words:
            reason = rng.choice(["", " "]) + " ".join(words) + rng.choice(["", " "])
        else:
            reason = rng.choice([None, "", " "])
        cases.append((name, item, amount, reason))
    return cases


def _assert_well_formed(text: str, tokens: list[str]) -> None:
    assert text.split(" ") == tokens
    assert "" not in text.split(" ")
    assert not _CONTROL.search(text)


@pytest.mark.parametrize(("name", "item", "amount", "reason"), _sweep_cases())
def test_generated_valid_arguments_render_exact_tokens(name, item, amount, reason) -> None:
    reason_tokens = reason.split() if reason else []

    _assert_well_formed(commands.kick(name, reason).text, ["kick", name, *reason_tokens])
    _assert_well_formed(commands.ban(name, reason).text, ["ban", name, *reason_tokens])
    _assert_well_formed(commands.pardon(name).text, ["pardon", name])
    _assert_well_formed(commands.op(name).text, ["op", name])
    _assert_well_formed(commands.deop(name).text, ["deop", name])
    _assert_well_formed(
        commands.give(name, item, amount).text,
        ["give", name, item] + ([] if amount is None else [str(amount)]),
    )
    for mode in GameMode:
        _assert_well_formed(commands.set_game_mode(name, mode).text, ["gamemode", mode.value, name])
    for action in (WhitelistAction.ADD, WhitelistAction.REMOVE):
        _assert_well_formed(commands.set_whitelist(action, name).text, ["whitelist", action.value, name])


def _hostile_names(count: int = 100, seed: int = 7) -> list[str]:
    rng = random.Random(seed)
    names = []
    for _ in range(count):
        name = list("".join(rng.choice(_NAME_CHARS) for _ in range(rng.randint(1, 15))))
        name.insert(rng.randint(0, len(name)), rng.choice([" ", ";", "\n", "\x00", "#", "/", "\"", "é"]))
        names.append("".join(name))
    return names


@pytest.mark.parametrize("name", _hostile_names())
def test_generated_names_with_foreign_characters_are_rejected(name) -> None:
    with pytest.raises(InvalidArgumentError):
        commands.kick(name)
    with pytest.raises(InvalidArgumentError):
        commands.give(name, "diamond")
