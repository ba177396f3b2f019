"""Unit tests for engine.py — PokerTable hand flow."""
import random

import pytest

from dealers_choice.core.card import DeckExhaustedError, Rank
from dealers_choice.core.pot import PotInvariantError
from dealers_choice.game.actions import HandAbortedError, PlayerAction
from dealers_choice.game.engine import PokerTable
from dealers_choice.game.game_state import GamePhase, GameVariant, SeatResult
from dealers_choice.game.player import Player
from dealers_choice.models.snapshot import HIDDEN_CARD
from tests.helpers import make_table, stack_deck

# Player 1 (left of the dealer) is dealt first:
#   p1: As Ah Kd 7c 3s   (pair of aces)
#   p0: Kc 9d 6h 4s 2c   (king high)
DRAW_DECK = "As Kc Ah 9d Kd 6h 7c 4s 3s 2c Qd Jd 10d 8d"


def _draw_table(monkeypatch, deck=DRAW_DECK, num_players=2, **config):
    stack_deck(monkeypatch, deck)
    table = make_table(num_players, variant_lock="five_card_draw", **config)
    table.submit("p0", PlayerAction.buy_in())
    return table


def _check_down(table: PokerTable):
    """Check, call or stand pat until the hand is over."""
    result = None
    for _ in range(100):
        awaiting = table.awaiting
        pid = table.current_player_id
        if awaiting == "bet":
            valid = table.valid_actions(pid)
            action = PlayerAction.check() if valid.can_check else PlayerAction.call()
        elif awaiting == "draw":
            action = PlayerAction.stand_pat()
        else:
            return result
        result = table.submit(pid, action)
        assert result.valid, result.message
    raise AssertionError("hand did not finish")


class TestDealerChoice:
    def test_waits_for_players(self):
        table = make_table(1)
        assert table.awaiting == "players"
        assert not table.submit("p0", PlayerAction.choose_variant("texas_holdem")).valid

    def test_only_dealer_chooses(self):
        table = make_table(2)
        assert table.awaiting == "choose_variant"
        result = table.submit("p1", PlayerAction.choose_variant("texas_holdem"))
        assert not result.valid
        assert result.message == "Only the dealer chooses"

    def test_unknown_variant_rejected(self):
        table = make_table(2)
        result = table.submit("p0", PlayerAction.choose_variant("razz"))
        assert not result.valid
        assert table.state.phase is GamePhase.VARIANT_SELECT

    def test_holdem_skips_wild_select(self):
        table = make_table(2)
        assert table.submit("p0", PlayerAction.choose_variant("texas_holdem")).valid
        assert table.state.variant is GameVariant.TEXAS_HOLDEM
        assert table.awaiting == "buy_in"

    def test_draw_goes_to_wild_select(self):
        table = make_table(2)
        table.submit("p0", PlayerAction.choose_variant("five_card_draw"))
        assert table.awaiting == "choose_wilds"
        assert "follow_the_queen" not in table.offered_wilds

    def test_follow_the_queen_only_for_stud(self):
        table = make_table(2)
        table.submit("p0", PlayerAction.choose_variant("five_card_draw"))
        result = table.submit("p0", PlayerAction.choose_wilds(["follow_the_queen"]))
        assert not result.valid
        assert table.state.phase is GamePhase.WILD_SELECT

    def test_choose_wilds(self):
        table = make_table(2)
        table.submit("p0", PlayerAction.choose_variant("seven_card_stud"))
        result = table.submit("p0", PlayerAction.choose_wilds(["deuces", "one_eyed_jacks"], last_card_down=False))
        assert result.valid
        assert table.state.wilds.options == ["deuces", "one_eyed_jacks"]
        assert table.state.last_card_down is False
        assert table.awaiting == "buy_in"

    def test_wild_option_not_offered(self):
        table = make_table(2, wild_options=["deuces"])
        table.submit("p0", PlayerAction.choose_variant("five_card_draw"))
        assert not table.submit("p0", PlayerAction.choose_wilds(["jokers"])).valid

    def test_unknown_wild_option(self):
        table = make_table(2)
        table.submit("p0", PlayerAction.choose_variant("five_card_draw"))
        result = table.submit("p0", PlayerAction.choose_wilds(["purple"]))
        assert not result.valid
        assert "Unknown wild card option" in result.message

    def test_locked_variant_starts_at_ante(self):
        table = make_table(2, variant_lock="seven_card_stud", default_wilds=["follow_the_queen", "deuces"])
        assert table.awaiting == "buy_in"
        assert table.state.wilds.options == ["follow_the_queen", "deuces"]

    def test_locked_draw_drops_follow_the_queen(self):
        table = make_table(2, variant_lock="five_card_draw", default_wilds=["follow_the_queen", "deuces"])
        assert table.state.wilds.options == ["deuces"]


class TestNoWildShowdown:
    def test_pair_beats_king_high(self, monkeypatch):
        table = _draw_table(monkeypatch)
        assert table.pot.total == 2
        assert table.current_player_id == "p1"

        assert table.submit("p1", PlayerAction.check()).valid
        assert table.submit("p0", PlayerAction.check()).valid
        assert table.awaiting == "draw"
        assert table.current_player_id == "p1"
        table.submit("p1", PlayerAction.stand_pat())
        table.submit("p0", PlayerAction.stand_pat())
        assert table.state.betting_round == 2
        table.submit("p1", PlayerAction.check())
        result = table.submit("p0", PlayerAction.check())

        assert result.hand_over
        assert result.pot_awarded == {"p1": 2}
        state = table.state
        assert state.get_player("p1").chips == 1001
        assert state.get_player("p0").chips == 999
        assert state.get_player("p1").result is SeatResult.WIN
        assert state.get_player("p0").result is SeatResult.LOSE
        assert state.last_message == "Player 1 wins with One Pair"
        assert table.awaiting == "next_hand"
        assert table.last_result["hands"]["p0"]["hand_name"] == "High Card"

    def test_showdown_reveals_hands(self, monkeypatch):
        table = _draw_table(monkeypatch)
        _check_down(table)
        snap = table.get_state("p1")
        assert snap.seat("p0").cards == ["Kc", "9d", "6h", "4s", "2c"]
        assert snap.seat("p0").hand_name == "High Card"

    def test_ante_is_dead_money(self, monkeypatch):
        table = _draw_table(monkeypatch)
        assert all(p.bet == 0 for p in table.state.players)
        assert table.valid_actions("p1").can_check


class TestFoldToOne:
    def test_fold_awards_pot_without_showdown(self, monkeypatch):
        table = _draw_table(monkeypatch)
        table.submit("p1", PlayerAction.raise_by(5))
        result = table.submit("p0", PlayerAction.fold())
        assert result.hand_over
        assert result.pot_awarded == {"p1": 7}
        assert table.state.won_by_fold
        assert table.state.get_player("p1").chips == 1001
        assert table.state.get_player("p0").chips == 999
        assert table.last_result["hands"] == {}

    def test_folded_winner_cards_stay_hidden(self, monkeypatch):
        table = _draw_table(monkeypatch)
        table.submit("p1", PlayerAction.raise_by(5))
        table.submit("p0", PlayerAction.fold())
        assert table.get_state("p0").seat("p1").cards == [HIDDEN_CARD] * 5


class TestActionGating:
    def test_wrong_seat(self, monkeypatch):
        table = _draw_table(monkeypatch)
        result = table.submit("p0", PlayerAction.check())
        assert not result.valid
        assert result.message == "Not your turn"

    def test_illegal_bets_change_nothing(self, monkeypatch):
        table = _draw_table(monkeypatch)
        before = table.get_state(None)
        assert not table.submit("p1", PlayerAction.call()).valid
        assert not table.submit("p1", PlayerAction.raise_by(3)).valid
        assert not table.submit("p1", PlayerAction.raise_by(5000)).valid
        assert not table.submit("p1", PlayerAction.stand_pat()).valid
        assert not table.submit("p1", PlayerAction.choose_variant("texas_holdem")).valid
        assert table.get_state(None) == before

    def test_unknown_player(self, monkeypatch):
        table = _draw_table(monkeypatch)
        result = table.submit("ghost", PlayerAction.check())
        assert not result.valid
        assert "not found" in result.message

    def test_buy_in_twice_rejected(self, monkeypatch):
        table = _draw_table(monkeypatch)
        assert not table.submit("p1", PlayerAction.buy_in()).valid

    def test_next_hand_only_after_settlement(self, monkeypatch):
        table = _draw_table(monkeypatch)
        assert not table.submit("p0", PlayerAction.next_hand()).valid


class TestDraw:
    def _to_draw(self, monkeypatch):
        table = _draw_table(monkeypatch)
        table.submit("p1", PlayerAction.check())
        table.submit("p0", PlayerAction.check())
        return table

    def test_four_discards_need_an_ace(self, monkeypatch):
        table = self._to_draw(monkeypatch)
        result = table.submit("p1", PlayerAction.discard([0, 1, 2, 3]))
        assert not result.valid
        assert table.current_player_id == "p1"

    def test_draw_four_keeping_ace(self, monkeypatch):
        table = self._to_draw(monkeypatch)
        result = table.submit("p1", PlayerAction.discard([1, 2, 3, 4]))
        assert result.valid
        assert result.cards_drawn == 4
        hand = table.state.get_player("p1").hand
        assert [str(c) for c in hand] == ["As", "Qd", "Jd", "10d", "8d"]
        assert all(c.face_down for c in hand)
        assert table.current_player_id == "p0"
        assert table.get_state(None).seat("p1").discards == 4

    def test_draw_out_of_turn(self, monkeypatch):
        table = self._to_draw(monkeypatch)
        assert not table.submit("p0", PlayerAction.stand_pat()).valid

    def test_draw_reuses_muck_when_deck_runs_short(self):
        table = make_table(6, variant_lock="five_card_draw")
        table.submit("p0", PlayerAction.buy_in())
        for _ in range(6):
            table.submit(table.current_player_id, PlayerAction.check())
        assert table.awaiting == "draw"
        for _ in range(6):
            pid = table.current_player_id
            hand = table.state.get_player(pid).hand
            keep = max(range(5), key=lambda i: hand[i].value)
            if hand[keep].rank is Rank.ACE:
                discards = [i for i in range(5) if i != keep]
            else:
                discards = [i for i in range(5) if i != keep][:3]
            assert table.submit(pid, PlayerAction.discard(discards)).valid
        held = [c for p in table.state.players for c in p.hand]
        assert len(held) == 30
        assert len(set(held)) == 30


class TestHoldem:
    def test_heads_up_blinds_and_order(self):
        table = make_table(2, variant_lock="texas_holdem")
        table._rng = random.Random(3)
        table.submit("p1", PlayerAction.buy_in())
        state = table.state
        assert (state.small_blind_index, state.big_blind_index) == (0, 1)
        assert table.current_player_id == "p0"
        assert table.valid_actions("p0").call_amount == 1

        table.submit("p0", PlayerAction.call())
        assert table.current_player_id == "p1"
        assert table.valid_actions("p1").can_check
        table.submit("p1", PlayerAction.check())

        assert len(state.community_cards) == 3
        assert state.stage_name == "flop"
        assert table.current_player_id == "p1"

    def test_full_hand_conserves_chips(self):
        table = make_table(3, variant_lock="texas_holdem")
        table.submit("p0", PlayerAction.buy_in())
        result = _check_down(table)
        assert result.hand_over
        assert len(table.state.community_cards) == 5
        assert sum(p.chips for p in table.state.players) == 3000

    def test_all_in_runs_out_the_board(self):
        table = make_table(2, variant_lock="texas_holdem")
        table.submit("p0", PlayerAction.buy_in())
        table.submit("p0", PlayerAction.all_in())
        result = table.submit("p1", PlayerAction.call())
        assert result.hand_over
        assert len(table.state.community_cards) == 5
        assert sum(p.chips for p in table.state.players) == 2000


class TestStud:
    STUD_DECK = "2c 3c 4d 5d Qh 7c"

    def test_follow_the_queen_from_deal(self, monkeypatch):
        stack_deck(monkeypatch, self.STUD_DECK)
        table = make_table(2, variant_lock="seven_card_stud", default_wilds=["follow_the_queen"])
        table.submit("p0", PlayerAction.buy_in())
        wilds = table.state.wilds
        assert wilds.followed_rank is Rank.SEVEN
        snap = table.get_state(None)
        assert snap.wilds.followed_rank == "7"
        assert snap.wilds.wild_ranks == ["Q", "7"]

    def test_up_cards_visible_to_opponents(self, monkeypatch):
        stack_deck(monkeypatch, self.STUD_DECK)
        table = make_table(2, variant_lock="seven_card_stud")
        table.submit("p0", PlayerAction.buy_in())
        snap = table.get_state("p0")
        assert snap.seat("p1").cards == [HIDDEN_CARD, HIDDEN_CARD, "Qh"]
        assert snap.seat("p0").cards == ["3c", "5d", "7c"]

    def test_best_up_card_opens(self, monkeypatch):
        stack_deck(monkeypatch, self.STUD_DECK)
        table = make_table(2, variant_lock="seven_card_stud")
        table.submit("p0", PlayerAction.buy_in())
        assert table.current_player_id == "p1"

    def test_opener_tie_goes_to_lowest_seat(self, monkeypatch):
        # queen and seven are both wild: equal up-cards
        stack_deck(monkeypatch, self.STUD_DECK)
        table = make_table(2, variant_lock="seven_card_stud", default_wilds=["follow_the_queen"])
        table.submit("p1", PlayerAction.buy_in())
        assert table.current_player_id == "p0"

    def test_seventh_card_face_down(self):
        table = make_table(3, variant_lock="seven_card_stud")
        table.submit("p0", PlayerAction.buy_in())
        _check_down(table)
        for p in table.state.players:
            assert len(p.hand) == 7
            assert [c.face_down for c in p.hand] == [True, True, False, False, False, False, True]

    def test_seventh_card_face_up(self):
        table = make_table(2, variant_lock="seven_card_stud", last_card_down=False)
        table.submit("p0", PlayerAction.buy_in())
        _check_down(table)
        assert all(not p.hand[6].face_down for p in table.state.players)


class TestRemovePlayer:
    def test_remove_between_hands(self):
        table = make_table(3)
        result = table.remove_player("p2")
        assert result.valid
        assert table.state.get_player("p2").is_eliminated
        assert len(table.state.seated_players) == 2

    def test_remove_dealer_moves_button(self):
        table = make_table(3)
        table.remove_player("p0")
        assert table.dealer_player_id == "p1"

    def test_remove_current_awards_last_seat(self, monkeypatch):
        table = _draw_table(monkeypatch)
        result = table.remove_player("p1")
        assert result.hand_over
        state = table.state
        assert state.get_player("p0").chips == 1001
        assert state.get_player("p1").is_eliminated
        assert state.game_over
        assert state.winner_id == "p0"
        assert table.awaiting is None

    def test_remove_waiting_seat_mid_hand(self, monkeypatch):
        stack_deck(monkeypatch, DRAW_DECK + " 5c 5d 5h 5s 6c 6d 6s 7d 7h 7s")
        table = make_table(3, variant_lock="five_card_draw")
        table.submit("p0", PlayerAction.buy_in())
        assert table.current_player_id == "p1"
        table.remove_player("p2")
        p2 = table.state.get_player("p2")
        assert p2.is_folded and p2.has_left and not p2.is_eliminated
        assert table.current_player_id == "p1"
        assert table.pot.total == 3
        _check_down(table)
        assert p2.is_eliminated
        assert p2.chips == 999
        assert sum(p.chips for p in table.state.players) == 3000

    def test_remove_unknown(self):
        table = make_table(2)
        assert not table.remove_player("ghost").valid


class TestSeating:
    def test_table_full(self):
        table = make_table(6)
        assert not table.add_player(Player("p6", "Late"))

    def test_duplicate_id(self):
        table = make_table(2)
        assert not table.add_player(Player("p0", "Again"))

    def test_join_mid_hand_sits_out(self, monkeypatch):
        table = _draw_table(monkeypatch)
        assert table.add_player(Player("p2", "Late"))
        late = table.state.get_player("p2")
        assert late.is_folded
        assert late.hand == []

    def test_custom_buy_in(self):
        table = make_table(0)
        table.add_player(Player("p0", "Rich", chips=5000))
        assert table.state.get_player("p0").chips == 5000


class TestSettlement:
    def test_next_hand_rotates_dealer(self, monkeypatch):
        table = _draw_table(monkeypatch)
        _check_down(table)
        assert table.submit("p1", PlayerAction.next_hand()).valid
        assert table.dealer_player_id == "p1"
        assert table.awaiting == "buy_in"
        assert all(p.hand == [] for p in table.state.players)

    def test_busted_seat_eliminated(self, monkeypatch):
        stack_deck(monkeypatch, "2c As 3d Ah 4h Kd 5s Kc 7c 9s")
        table = make_table(2, variant_lock="five_card_draw")
        table.state.get_player("p1").chips = 1
        table.submit("p0", PlayerAction.buy_in())
        # p1 is all-in on the ante; p0 still draws
        assert table.awaiting == "draw"
        assert table.current_player_id == "p0"
        result = table.submit("p0", PlayerAction.stand_pat())
        assert result.hand_over
        state = table.state
        assert state.get_player("p1").is_eliminated
        assert state.game_over
        assert state.winner_id == "p0"
        assert state.get_player("p0").chips == 1001

    def test_short_all_in_side_pot(self, monkeypatch):
        # p1 (all-in for 50) holds the best hand, p0 and p2 contest the side pot
        stack_deck(monkeypatch, "As 2c Kc Ah 3d Kd Ac 4h Qh Ad 6s Qd 9s 8c Js")
        table = make_table(3, variant_lock="five_card_draw", ante=0)
        table.state.get_player("p1").chips = 50
        table.submit("p0", PlayerAction.buy_in())
        table.submit("p1", PlayerAction.all_in())
        table.submit("p2", PlayerAction.raise_by(150))
        table.submit("p0", PlayerAction.call())
        _check_down(table)
        state = table.state
        assert state.get_player("p1").chips == 150
        assert state.get_player("p1").result is SeatResult.WIN
        assert state.get_player("p0").chips == 1100
        assert state.get_player("p2").chips == 800


class TestAbort:
    def test_deck_exhaustion_refunds(self, monkeypatch):
        stack_deck(monkeypatch, "As Kc Ah")
        table = make_table(2, variant_lock="five_card_draw")
        with pytest.raises(HandAbortedError) as info:
            table.submit("p0", PlayerAction.buy_in())
        assert isinstance(info.value.cause, DeckExhaustedError)
        state = table.state
        assert [p.chips for p in state.players] == [1000, 1000]
        assert table.pot.total == 0
        assert state.phase is GamePhase.SETTLEMENT
        assert table.awaiting == "next_hand"

    def test_pot_invariant_refunds(self, monkeypatch):
        table = _draw_table(monkeypatch)
        table.submit("p1", PlayerAction.raise_by(20))
        table.submit("p0", PlayerAction.call())

        def broken():
            raise PotInvariantError("bad pot")

        monkeypatch.setattr(table.pot, "calculate_side_pots", broken)
        with pytest.raises(HandAbortedError):
            _check_down(table)
        assert [p.chips for p in table.state.players] == [1000, 1000]
        assert all(p.result is None for p in table.state.players)

    def test_next_hand_after_abort(self, monkeypatch):
        stack_deck(monkeypatch, "As Kc Ah")
        table = make_table(2, variant_lock="five_card_draw")
        with pytest.raises(HandAbortedError):
            table.submit("p0", PlayerAction.buy_in())
        assert table.submit("p0", PlayerAction.next_hand()).valid
        assert table.awaiting == "buy_in"

    def test_seat_that_left_is_eliminated_by_abort(self, monkeypatch):
        table = make_table(3, variant_lock="five_card_draw")
        table.submit("p0", PlayerAction.buy_in())
        assert table.current_player_id == "p1"
        assert table.remove_player("p2").valid

        def broken():
            raise PotInvariantError("bad pot")

        monkeypatch.setattr(table.pot, "calculate_side_pots", broken)
        with pytest.raises(HandAbortedError):
            _check_down(table)
        leaver = table.state.get_player("p2")
        assert leaver.is_eliminated
        assert not table.state.game_over

        monkeypatch.undo()
        assert table.submit("p0", PlayerAction.next_hand()).valid
        assert table.submit("p0", PlayerAction.buy_in()).valid
        assert leaver.hand == []
        assert leaver not in table.state.active_players


class TestSnapshot:
    def test_own_cards_visible_others_hidden(self, monkeypatch):
        table = _draw_table(monkeypatch)
        snap = table.get_state("p1")
        assert snap.seat("p1").cards == ["As", "Ah", "Kd", "7c", "3s"]
        assert snap.seat("p0").cards == [HIDDEN_CARD] * 5
        assert snap.seat("p0").hand_name is None

    def test_spectator_sees_nothing(self, monkeypatch):
        table = _draw_table(monkeypatch)
        snap = table.get_state(None)
        assert all(card == HIDDEN_CARD for s in snap.seats for card in s.cards)
        assert snap.valid_actions == []

    def test_viewer_actions(self, monkeypatch):
        table = _draw_table(monkeypatch)
        snap = table.get_state("p1")
        assert snap.valid_actions == ["check", "raise", "fold", "all_in"]
        assert snap.current_player_id == "p1"
        assert snap.awaiting == "bet"
        assert snap.stage == "before_draw"
        assert snap.pot == 2
        assert [p.amount for p in snap.pots] == [2]
        assert table.get_state("p0").valid_actions == []

    def test_snapshot_is_frozen(self, monkeypatch):
        table = _draw_table(monkeypatch)
        snap = table.get_state("p1")
        with pytest.raises(Exception):
            snap.pot = 100

    def test_snapshot_serializes(self, monkeypatch):
        table = _draw_table(monkeypatch)
        data = table.get_state("p1").model_dump()
        assert data["variant"] == "five_card_draw"
        assert data["seats"][0]["is_dealer"] is True


class TestBotAction:
    def test_bot_acts_only_on_its_turn(self, monkeypatch):
        table = _draw_table(monkeypatch)
        assert table.bot_action("p0") is None
        assert table.bot_action("p1") is not None

    def test_dealer_bot_chooses_variant(self):
        table = make_table(2)
        action = table.bot_action("p0")
        assert table.submit("p0", action).valid
        assert table.bot_action("p1") is None or table.awaiting == "buy_in"
