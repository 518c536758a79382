from bson import ObjectId
from structlog.testing import capture_logs

from pongbot.database.models import Challenge, ChallengeState, ChallengeType
from pongbot.exceptions import ErrorKind
from pongbot.results import Failure, Notice, Success


def assert_missing(result, name):
    assert isinstance(result, Failure)
    assert result.kind == ErrorKind.PLAYER_NOT_FOUND
    assert result.message == f"User '{name}' does not exist."


async def test_configuration_is_explicit(pong):
    assert pong.channel == "#pongbot"
    assert pong.delta_tau == 0.94


async def test_register_creates_player_with_zero_stats(pong, players):
    result = await pong.register_player("ZhangJike")
    assert isinstance(result, Success)

    user = await players.find_one("ZhangJike")
    assert user is not None
    assert user.name == "ZhangJike"
    assert user.wins == 0
    assert user.losses == 0
    assert user.elo == 0
    assert user.tau == 0
    assert user.current_challenge is None


async def test_register_rejects_duplicate(pong):
    await pong.register_player("ZhangJike")
    result = await pong.register_player("ZhangJike")
    assert isinstance(result, Failure)
    assert result.kind == ErrorKind.DUPLICATE_PLAYER


async def test_names_are_case_sensitive(pong):
    await pong.register_player("ZhangJike")
    assert (await pong.register_player("zhangjike")).ok


async def test_find_player(pong, register):
    await register("ZhangJike")
    result = await pong.find_player("ZhangJike")
    assert isinstance(result, Success)
    assert result.payload.name == "ZhangJike"


async def test_find_missing_player(pong):
    assert_missing(await pong.find_player("ZhangJike"), "ZhangJike")


async def test_get_everyone_logs_and_returns_players(pong, register):
    await register("ZhangJike")
    with capture_logs() as logs:
        result = await pong.get_everyone()

    assert [p.name for p in result.payload] == ["ZhangJike"]
    listed = [entry for entry in logs if entry["event"] == "Players listed"]
    assert len(listed) == 1
    assert listed[0]["players"][0]["name"] == "ZhangJike"


async def test_update_wins_missing_player(pong):
    assert_missing(await pong.update_wins("ZhangJike"), "ZhangJike")


async def test_update_wins_increments(pong, register):
    await register("ZhangJike")
    await pong.update_wins("ZhangJike")
    assert (await pong.find_player("ZhangJike")).payload.wins == 1
    await pong.update_wins("ZhangJike")
    assert (await pong.find_player("ZhangJike")).payload.wins == 2


async def test_update_losses_missing_player(pong):
    assert_missing(await pong.update_losses("ZhangJike"), "ZhangJike")


async def test_update_losses_increments(pong, register):
    await register("ZhangJike")
    for _ in range(3):
        await pong.update_losses("ZhangJike")
    player = (await pong.find_player("ZhangJike")).payload
    assert player.losses == 3
    assert player.wins == 0


async def test_reset_missing_player(pong):
    assert_missing(await pong.reset("ZhangJike"), "ZhangJike")


async def test_reset_restores_baseline(pong, players, register):
    await register("ZhangJike")
    user = await players.find_one("ZhangJike")
    user.wins, user.losses, user.tau, user.elo = 42, 24, 3, 158
    await players.save(user)

    await pong.reset("ZhangJike")

    user = (await pong.find_player("ZhangJike")).payload
    assert user.wins == 0
    assert user.losses == 0
    assert user.elo == 0
    assert user.tau == 1


async def test_leaderboard_orders_by_rating(pong, players, register):
    await register("A", "B", "C")
    for name, elo in (("A", 10), ("B", 30), ("C", 20)):
        player = await players.find_one(name)
        player.elo = elo
        await players.save(player)

    result = await pong.leaderboard(2)
    assert [p.name for p in result.payload] == ["B", "C"]


class TestCreateSingleChallenge:

    async def test_missing_challenger(self, pong):
        assert_missing(await pong.create_single_challenge("ZhangJike", "DengYaping"), "ZhangJike")

    async def test_missing_challenged(self, pong, register):
        await register("ZhangJike")
        assert_missing(await pong.create_single_challenge("ZhangJike", "DengYaping"), "DengYaping")

    async def test_creates_challenge(self, pong, register):
        await register("ZhangJike", "DengYaping")
        result = await pong.create_single_challenge("ZhangJike", "DengYaping")

        assert isinstance(result, Notice)
        assert result.message == "You have challenged DengYaping to a ping pong match!"
        challenge = result.payload
        assert challenge.type == ChallengeType.SINGLE
        assert challenge.state == ChallengeState.PROPOSED
        assert challenge.challenger == ["ZhangJike"]
        assert challenge.challenged == ["DengYaping"]

        challenger = (await pong.find_player("ZhangJike")).payload
        challenged = (await pong.find_player("DengYaping")).payload
        assert challenger.current_challenge == challenge.id
        assert challenged.current_challenge == challenge.id

    async def test_existing_challenge(self, pong, register):
        await register("ZhangJike", "DengYaping")
        await pong.create_single_challenge("ZhangJike", "DengYaping")

        result = await pong.create_single_challenge("ZhangJike", "DengYaping")
        assert isinstance(result, Failure)
        assert result.kind == ErrorKind.CHALLENGE_ALREADY_ACTIVE
        assert result.message == "There's already an active challenge for ZhangJike"

    async def test_challenged_state_is_not_checked(self, pong, register):
        await register("ZhangJike", "DengYaping", "ChenQi")
        await pong.create_single_challenge("ZhangJike", "DengYaping")

        result = await pong.create_single_challenge("ChenQi", "DengYaping")
        assert isinstance(result, Notice)
        challenged = (await pong.find_player("DengYaping")).payload
        assert challenged.current_challenge == result.payload.id

    async def test_self_challenge(self, pong, register, challenges):
        await register("ZhangJike")
        result = await pong.create_single_challenge("ZhangJike", "ZhangJike")
        assert result.kind == ErrorKind.INVALID_CHALLENGE
        assert len(challenges) == 0


class TestCreateDoubleChallenge:

    async def test_creates_challenge(self, pong, register):
        await register("ZhangJike", "DengYaping", "ChenQi", "ViktorBarna")
        result = await pong.create_double_challenge("ZhangJike", "DengYaping", "ChenQi", "ViktorBarna")

        assert isinstance(result, Notice)
        assert result.message == (
            "You and DengYaping have challenged ChenQi and ViktorBarna to a ping pong match!"
        )
        challenge = result.payload
        assert challenge.type == ChallengeType.DOUBLE
        assert challenge.challenger == ["ZhangJike", "DengYaping"]
        assert challenge.challenged == ["ChenQi", "ViktorBarna"]
        for name in ("ZhangJike", "DengYaping", "ChenQi", "ViktorBarna"):
            player = (await pong.find_player(name)).payload
            assert player.current_challenge == challenge.id

    async def test_reports_first_missing_name(self, pong, register):
        await register("ZhangJike", "DengYaping")
        result = await pong.create_double_challenge("ZhangJike", "DengYaping", "ChenQi", "ViktorBarna")
        assert_missing(result, "ChenQi")

    async def test_repeated_player(self, pong, register):
        await register("ZhangJike", "DengYaping", "ChenQi")
        result = await pong.create_double_challenge("ZhangJike", "DengYaping", "ChenQi", "ZhangJike")
        assert result.kind == ErrorKind.INVALID_CHALLENGE
        assert (await pong.find_player("ZhangJike")).payload.current_challenge is None

    async def test_existing_challenge(self, pong, register):
        await register("ZhangJike", "DengYaping", "ChenQi", "ViktorBarna", "MaLong")
        await pong.create_single_challenge("ZhangJike", "MaLong")
        result = await pong.create_double_challenge("ZhangJike", "DengYaping", "ChenQi", "ViktorBarna")
        assert result.message == "There's already an active challenge for ZhangJike"


async def test_check_challenge_missing_player(pong):
    assert_missing(await pong.check_challenge("ZhangJike"), "ZhangJike")


async def test_check_challenge_without_challenge(pong, register):
    await register("ZhangJike")
    result = await pong.check_challenge("ZhangJike")
    assert result.kind == ErrorKind.NO_ACTIVE_CHALLENGE


async def test_check_challenge_returns_current(pong, players, challenges, register):
    await register("ZhangJike")
    challenge = await challenges.create(Challenge(state="Proposed", type="Single"))
    user = await players.find_one("ZhangJike")
    user.current_challenge = challenge.id
    await players.save(user)

    result = await pong.check_challenge("ZhangJike")
    assert isinstance(result, Success)
    assert result.payload.type == ChallengeType.SINGLE


async def test_check_challenge_with_dangling_reference(pong, register):
    await register("ZhangJike")
    await pong.set_challenge("ZhangJike", ObjectId())
    result = await pong.check_challenge("ZhangJike")
    assert result.kind == ErrorKind.NO_ACTIVE_CHALLENGE


async def test_check_challenge_with_finished_challenge(pong, challenges, register):
    await register("ZhangJike")
    challenge = await challenges.create(Challenge(type=ChallengeType.SINGLE, state="Declined"))
    await pong.set_challenge("ZhangJike", challenge.id)
    result = await pong.check_challenge("ZhangJike")
    assert result.kind == ErrorKind.NO_ACTIVE_CHALLENGE


async def test_set_challenge_missing_player(pong):
    assert_missing(await pong.set_challenge("ZhangJike", None), "ZhangJike")


async def test_set_challenge(pong, challenges, register):
    await register("ZhangJike")
    challenge = await challenges.create(Challenge(type=ChallengeType.SINGLE))

    await pong.set_challenge("ZhangJike", challenge.id)

    user = (await pong.find_player("ZhangJike")).payload
    assert user.current_challenge == challenge.id


async def test_remove_challenge_clears_only_that_player(pong, challenges, register):
    await register("ZhangJike", "DengYaping")
    challenge = (await pong.create_single_challenge("ZhangJike", "DengYaping")).payload

    result = await pong.remove_challenge("DengYaping")
    assert isinstance(result, Success)

    assert (await pong.find_player("DengYaping")).payload.current_challenge is None
    assert (await pong.find_player("ZhangJike")).payload.current_challenge == challenge.id
    assert await challenges.find_one(challenge.id) is not None


async def test_remove_challenge_without_challenge(pong, register):
    await register("ZhangJike")
    result = await pong.remove_challenge("ZhangJike")
    assert result.ok
    assert result.payload.current_challenge is None


async def test_get_duel_gif(pong, gif_url):
    result = await pong.get_duel_gif()
    assert result.payload == gif_url
    assert result.payload.startswith("http")
