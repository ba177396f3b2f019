"""Unit tests for the request, event and snapshot models."""
import pytest
from pydantic import ValidationError

from dealers_choice.config import TableConfig
from dealers_choice.game.actions import ActionType, IllegalActionError
from dealers_choice.models.events import ActionPayload, ClientAction, ServerEvent
from dealers_choice.models.requests import ActionRequest, CreateGameRequest, JoinGameRequest
from tests.helpers import make_table


class TestTableConfig:
    def test_defaults(self):
        config = TableConfig()
        assert config.starting_stack == 1000
        assert config.max_seats == 6
        assert "follow_the_queen" in config.wild_options

    def test_unknown_variant_rejected(self):
        with pytest.raises(ValidationError):
            TableConfig(variant_lock="razz")

    def test_unknown_wild_rejected(self):
        with pytest.raises(ValidationError):
            TableConfig(default_wilds=["purple_cards"])

    def test_blinds_must_be_ordered(self):
        with pytest.raises(ValidationError):
            TableConfig(small_blind=5, big_blind=2)

    def test_seat_limit(self):
        with pytest.raises(ValidationError):
            TableConfig(max_seats=7)

    def test_default_wilds_must_be_offered(self):
        with pytest.raises(ValidationError, match="default_wilds not in wild_options: jokers"):
            TableConfig(wild_options=["deuces"], default_wilds=["deuces", "jokers"])

    def test_default_wilds_within_offer(self):
        config = TableConfig(wild_options=["deuces", "jokers"], default_wilds=["jokers"])
        assert config.default_wilds == ["jokers"]


class TestCreateGameRequest:
    def test_to_config(self):
        req = CreateGameRequest(variant_lock="seven_card_stud", default_wilds=["deuces"], num_bots=3)
        config = req.to_config()
        assert config.variant_lock == "seven_card_stud"
        assert config.default_wilds == ["deuces"]
        assert not hasattr(config, "num_bots")

    def test_wild_options_override(self):
        config = CreateGameRequest(wild_options=["jokers"]).to_config()
        assert config.wild_options == ["jokers"]

    def test_default_wild_options_kept(self):
        assert CreateGameRequest().to_config().wild_options == TableConfig().wild_options

    def test_inconsistent_blinds_fail_on_conversion(self):
        req = CreateGameRequest(small_blind=10, big_blind=5)
        with pytest.raises(ValidationError):
            req.to_config()

    def test_bad_variant_pattern(self):
        with pytest.raises(ValidationError):
            CreateGameRequest(variant_lock="omaha")

    def test_too_many_bots(self):
        with pytest.raises(ValidationError):
            CreateGameRequest(num_bots=6)


class TestJoinGameRequest:
    def test_name_required(self):
        with pytest.raises(ValidationError):
            JoinGameRequest(player_name="")

    def test_buy_in_optional(self):
        assert JoinGameRequest(player_name="Alice").buy_in is None


class TestActionRequest:
    def test_raise(self):
        action = ActionRequest(player_id="p1", action="raise", amount=20).to_action()
        assert action.type is ActionType.RAISE
        assert action.amount == 20

    def test_discard(self):
        action = ActionRequest(player_id="p1", action="discard", indices=[0, 3]).to_action()
        assert action.indices == (0, 3)

    def test_choose_wilds(self):
        req = ActionRequest(player_id="p1", action="choose_wilds", wilds=["jokers"], last_card_down=False)
        action = req.to_action()
        assert action.wilds == ("jokers",)
        assert action.last_card_down is False

    def test_unknown_action(self):
        with pytest.raises(ValidationError):
            ActionRequest(player_id="p1", action="shove")

    def test_negative_amount(self):
        with pytest.raises(ValidationError):
            ActionRequest(player_id="p1", action="raise", amount=-5)


class TestEvents:
    def test_client_action_default_payload(self):
        assert ClientAction(type="ping").payload == {}

    def test_action_payload(self):
        action = ActionPayload(action="choose_variant", variant="texas_holdem").to_action()
        assert action.type is ActionType.CHOOSE_VARIANT
        assert action.variant == "texas_holdem"

    def test_action_payload_unknown(self):
        with pytest.raises(IllegalActionError):
            ActionPayload(action="shove").to_action()

    def test_action_payload_null_amount(self):
        assert ActionPayload(action="call", amount=None).to_action().amount == 0

    def test_server_event_dump(self):
        assert ServerEvent(type="pong", payload={}).model_dump() == {"type": "pong", "payload": {}}


class TestSnapshot:
    def test_snapshot_is_frozen(self):
        snap = make_table(2).get_state("p0")
        with pytest.raises(ValidationError):
            snap.pot = 5

    def test_seat_lookup(self):
        snap = make_table(2).get_state("p0")
        assert snap.seat("p1").name == "Player 1"
        assert snap.seat("nobody") is None
        assert snap.viewer_id == "p0"
        assert snap.awaiting == "choose_variant"
