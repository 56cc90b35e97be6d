import json

import pytest

from conftest import make_input
from data_models import FinishedEdges, Piece, PiecePlacement, StripPlacement, StripPosition
from optimization_core import (OptimizationError, ValidationError, optimize_from_dict, optimize_slabs,
                               validate_input, verify_layout)
from slab_packer import Slab


class TestValidation:
    @pytest.mark.parametrize("kwargs,field", [
        ({'slab_width': 0}, 'slabWidth'),
        ({'slab_height': -1}, 'slabHeight'),
        ({'slab_width': 3000.5}, 'slabWidth'),
        ({'slab_width': True}, 'slabWidth'),
        ({'kerf_width': -1}, 'kerfWidth'),
    ])
    def test_rejects_bad_slab_parameters(self, kwargs, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_input(make_input([Piece("P1", 100, 100)], **kwargs))
        assert exc_info.value.field == field

    def test_zero_kerf_is_valid(self):
        validate_input(make_input([Piece("P1", 100, 100)], kerf_width=0))

    def test_rejects_non_positive_piece_width(self):
        pieces = [Piece("P1", 100, 100), Piece("P2", 0, 100)]
        with pytest.raises(ValidationError) as exc_info:
            validate_input(make_input(pieces))
        assert exc_info.value.field == "pieces[1].width"
        assert "P2" in str(exc_info.value)

    def test_rejects_fractional_height(self):
        with pytest.raises(ValidationError, match="height"):
            validate_input(make_input([Piece("P1", 100, 10.5)]))

    def test_rejects_negative_thickness(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_input(make_input([Piece("P1", 100, 100, thickness=-20)]))
        assert exc_info.value.field == "pieces[0].thickness"

    def test_rejects_duplicate_ids(self):
        with pytest.raises(ValidationError, match="duplicate"):
            validate_input(make_input([Piece("P1", 100, 100), Piece("P1", 200, 200)]))

    def test_rejects_empty_id(self):
        with pytest.raises(ValidationError):
            validate_input(make_input([Piece("", 100, 100)]))

    def test_validation_happens_before_packing(self):
        with pytest.raises(ValidationError):
            optimize_slabs(make_input([Piece("P1", 100, 100)], slab_width=0))


class TestExamples:
    def test_single_piece(self):
        result = optimize_slabs(make_input([Piece("P1", 2000, 600, label="Bench")]))

        assert result.total_slabs == 1
        placement = result.placements[0]
        assert (placement.slab_index, placement.x, placement.y, placement.rotated) == (0, 0, 0, False)
        assert result.total_used_area == 1_200_000
        assert result.total_waste_area == 3_000_000
        assert result.waste_percent == 71.43
        assert result.unplaced_pieces == []
        assert result.lamination_summary is None

    def test_oversized_piece(self):
        result = optimize_slabs(make_input([Piece("P1", 4000, 2000)]))

        assert result.unplaced_pieces == ["P1"]
        assert result.total_slabs == 0
        assert result.placements == []
        assert result.waste_percent == 0.0

    def test_two_pieces_fill_one_slab(self):
        pieces = [Piece("A", 1600, 1400), Piece("B", 1600, 1400)]
        result = optimize_slabs(make_input(pieces, slab_width=3200, slab_height=1400, kerf_width=0))

        assert result.total_slabs == 1
        assert [(p.piece_id, p.x, p.y) for p in result.placements] == [("A", 0, 0), ("B", 1600, 0)]
        assert result.total_waste_area == 0
        assert result.waste_percent == 0.0

    def test_lamination_summary(self, laminated_piece):
        result = optimize_slabs(make_input([laminated_piece]))

        summary = result.lamination_summary
        assert summary is not None
        assert summary.total_strips == 2
        assert summary.total_strip_area == 72000
        entries = summary.strips_by_parent["P1"]
        assert [(e.position, e.length_mm, e.width_mm) for e in entries] == [
            (StripPosition.TOP, 1200, 40),
            (StripPosition.LEFT, 600, 40),
        ]

    def test_strip_placements(self, laminated_piece):
        result = optimize_slabs(make_input([laminated_piece]))

        assert [p.piece_id for p in result.placements] == ["P1", "P1-lam-top", "P1-lam-left"]
        strips = [p for p in result.placements if p.is_lamination_strip]
        assert all(isinstance(p, StripPlacement) and p.parent_piece_id == "P1" for p in strips)
        assert [(p.x, p.y) for p in strips] == [(0, 603), (0, 646)]

    def test_empty_piece_list(self):
        result = optimize_slabs(make_input([]))
        assert result.total_slabs == 0
        assert result.placements == []
        assert result.unplaced_pieces == []
        assert result.waste_percent == 0.0


class TestResultProperties:
    def test_every_piece_placed_or_unplaced_once(self, kitchen_pieces, kitchen_result):
        placed = [p.piece_id for p in kitchen_result.placements]
        assert len(placed) == len(set(placed))
        assert not set(placed) & set(kitchen_result.unplaced_pieces)
        for piece in kitchen_pieces:
            assert piece.id in placed

    def test_placements_inside_slab_and_kerf_separated(self, kitchen_result):
        for slab in kitchen_result.slabs:
            for p in slab.placements:
                assert 0 <= p.x and p.x + p.width <= slab.width
                assert 0 <= p.y and p.y + p.height <= slab.height
            for i, a in enumerate(slab.placements):
                for b in slab.placements[i + 1:]:
                    separated = (a.x + a.width + 3 <= b.x or b.x + b.width + 3 <= a.x or
                                 a.y + a.height + 3 <= b.y or b.y + b.height + 3 <= a.y)
                    assert separated, f"{a.piece_id} too close to {b.piece_id}"

    def test_area_accounting(self, kitchen_result):
        for slab in kitchen_result.slabs:
            assert slab.placements
            assert slab.used_area + slab.waste_area == slab.width * slab.height
        assert kitchen_result.total_slabs == len(kitchen_result.slabs)
        assert kitchen_result.total_used_area == sum(p.area for p in kitchen_result.placements)

    def test_slab_indices_contiguous(self, kitchen_result):
        assert [slab.slab_index for slab in kitchen_result.slabs] == list(range(kitchen_result.total_slabs))

    def test_non_rotatable_piece_keeps_orientation(self, kitchen_result):
        splashback = next(p for p in kitchen_result.placements if p.piece_id == "P4")
        assert not splashback.rotated
        assert (splashback.width, splashback.height) == (600, 450)

    def test_rotation_disabled_globally(self, kitchen_pieces):
        result = optimize_slabs(make_input(kitchen_pieces, allow_rotation=False))
        assert not any(p.rotated for p in result.placements)

    def test_deterministic(self, kitchen_pieces, config):
        first = optimize_slabs(make_input(kitchen_pieces), config)
        second = optimize_slabs(make_input(list(kitchen_pieces)), config)
        assert first.to_json() == second.to_json()


class TestVerifyLayout:
    def _piece(self, piece_id, x, y, width=100, height=100):
        return PiecePlacement(piece_id=piece_id, slab_index=0, x=x, y=y, width=width, height=height,
                              rotated=False, label=piece_id)

    def test_accepts_kerf_separated(self):
        slab = Slab(0, 1000, 1000, 3)
        slab.placements = [self._piece("A", 0, 0), self._piece("B", 103, 0)]
        verify_layout([slab], 3)

    def test_rejects_kerf_violation(self):
        slab = Slab(0, 1000, 1000, 3)
        slab.placements = [self._piece("A", 0, 0), self._piece("B", 101, 0)]
        with pytest.raises(OptimizationError, match="overlap"):
            verify_layout([slab], 3)

    def test_rejects_out_of_bounds(self):
        slab = Slab(0, 1000, 1000, 3)
        slab.placements = [self._piece("A", 950, 0)]
        with pytest.raises(OptimizationError, match="outside"):
            verify_layout([slab], 3)

    def test_rejects_empty_slab(self):
        with pytest.raises(OptimizationError):
            verify_layout([Slab(0, 1000, 1000, 3)], 3)

    def test_rejects_duplicate_placement(self):
        first = Slab(0, 1000, 1000, 3)
        first.placements = [self._piece("A", 0, 0)]
        second = Slab(1, 1000, 1000, 3)
        second.placements = [self._piece("A", 0, 0)]
        with pytest.raises(OptimizationError, match="more than once"):
            verify_layout([first, second], 3)


class TestDictInterface:
    def test_optimize_from_dict_uses_config_defaults(self, config):
        result = optimize_from_dict({'pieces': [{'id': 'P1', 'width': 2000, 'height': 600, 'label': 'Bench'}]},
                                    config)
        assert result.slabs[0].width == config.slab_width
        assert result.slabs[0].height == config.slab_height
        assert result.waste_percent == 71.43

    def test_request_overrides_config(self):
        result = optimize_from_dict({
            'pieces': [{'id': 'P1', 'width': 1000, 'height': 2000}],
            'slabWidth': 3000, 'slabHeight': 1400, 'kerfWidth': 3, 'allowRotation': False,
        })
        assert result.unplaced_pieces == ["P1"]

    def test_to_dict_shape(self, laminated_piece):
        data = optimize_slabs(make_input([laminated_piece])).to_dict()

        assert set(data) == {'placements', 'slabs', 'totalSlabs', 'totalUsedArea', 'totalWasteArea',
                             'wastePercent', 'unplacedPieces', 'laminationSummary'}
        strip = data['placements'][1]
        assert strip['isLaminationStrip'] is True
        assert strip['parentPieceId'] == 'P1'
        assert strip['stripPosition'] == 'top'
        assert data['laminationSummary']['stripsByParent']['P1'][0] == {
            'position': 'top', 'lengthMm': 1200, 'widthMm': 40,
        }

    def test_to_dict_omits_missing_lamination_summary(self):
        data = optimize_slabs(make_input([Piece("P1", 500, 500)])).to_dict()
        assert 'laminationSummary' not in data
        assert 'parentPieceId' not in data['placements'][0]

    def test_to_json_round_trips(self, kitchen_result):
        assert json.loads(kitchen_result.to_json()) == kitchen_result.to_dict()

    def test_finished_edges_from_request(self):
        result = optimize_from_dict({'pieces': [{
            'id': 'P1', 'width': 1200, 'height': 600, 'thickness': 40,
            'finishedEdges': {'top': True, 'bottom': False, 'left': True, 'right': False},
        }]})
        assert result.lamination_summary.total_strips == 2
        assert FinishedEdges.from_dict(None) == FinishedEdges()

    @pytest.mark.parametrize("pieces,field", [
        ([{'id': 'P1', 'height': 600}], 'pieces[0].width'),
        ([{'id': 'P1', 'width': 600}], 'pieces[0].height'),
        ([{'id': 'P1', 'width': 600, 'height': 600}, {'width': 100, 'height': 100}], 'pieces[1].id'),
        (["P1"], 'pieces[0]'),
        ({'id': 'P1'}, 'pieces'),
    ])
    def test_malformed_request_raises_validation_error(self, pieces, field):
        with pytest.raises(ValidationError) as exc_info:
            optimize_from_dict({'pieces': pieces})
        assert exc_info.value.field == field

    def test_non_mapping_request(self):
        with pytest.raises(ValidationError):
            optimize_from_dict(["P1"])


def test_piece_named_like_a_strip_is_placed_alongside_it():
    parent = Piece("P1", 1200, 600, thickness=40, finished_edges=FinishedEdges(top=True))
    namesake = Piece("P1-lam-top", 500, 500)

    result = optimize_slabs(make_input([parent, namesake]))

    placed = [p.piece_id for p in result.placements]
    assert sorted(placed) == ["P1", "P1-lam-top", "P1-lam-top-2"]
    assert result.unplaced_pieces == []
    strip = next(p for p in result.placements if p.is_lamination_strip)
    assert (strip.piece_id, strip.parent_piece_id) == ("P1-lam-top-2", "P1")
    assert result.lamination_summary.total_strips == 1
