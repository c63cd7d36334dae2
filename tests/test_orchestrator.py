"""
Tests for RenderOrchestrator: which events regenerate the scene, and how
file loading failures leave the current state untouched.
"""
from __future__ import annotations

import asyncio

import numpy as np
import pytest

from ecgplot.errors import DecodeError, LayoutError
from ecgplot.paper.orchestrator import RenderOrchestrator
from ecgplot.paper.primitives import LineSegment, Polyline
from ecgplot.paper.traces import LeadLayout
from ecgplot.waveform.decoder import RawWaveformRecord
from helpers import build_ecg_dataset, levels_of


@pytest.fixture
def orchestrator(surface) -> RenderOrchestrator:
    return RenderOrchestrator(surface, 1200, 720)


def polylines(commands):
    return [c for c in commands if isinstance(c, Polyline)]


class TestConstruction:
    def test_initial_layout_without_drawing(self, orchestrator, surface):
        assert orchestrator.layout.cell_size == 30
        assert orchestrator.layout.column_count == 40
        assert orchestrator.viewport == (1200, 720)
        assert not orchestrator.has_data
        assert surface.draw_count == 0

    def test_degenerate_initial_viewport(self, surface):
        with pytest.raises(LayoutError):
            RenderOrchestrator(surface, 0, 720)

    def test_redraw_without_data_draws_grid_only(self, orchestrator, surface):
        commands = orchestrator.redraw()

        assert surface.draw_count == 1
        assert surface.sizes[-1] == (1200, 720)
        assert all(isinstance(c, LineSegment) for c in commands)


class TestDataLoaded:
    def test_end_to_end_reference_record(self, orchestrator, surface):
        values = np.zeros(12 * 500, dtype=np.int16)
        values[0] = 500  # channel 0, sample 0
        record = RawWaveformRecord.from_values(12, 500, values.view(np.uint16))

        assert orchestrator.on_data_loaded(record)

        assert surface.draw_count == 1
        traces = polylines(surface.last)
        assert len(traces) == 12
        assert tuple(traces[0].points[0]) == pytest.approx((0.0, 15.0))
        assert traces[0].points[1, 0] == pytest.approx(2.4)

    def test_components_log_under_their_own_name(
        self, surface, make_record, log_records
    ):
        orchestrator = RenderOrchestrator(surface, 1200, 720)
        orchestrator.on_data_loaded(make_record(channels=15, samples=20))

        def components(text):
            return {r["extra"]["component"] for r in log_records if text in r["message"]}

        assert components("Grid layout changed") == {"grid"}
        assert components("Decoded 15 channels") == {"decoder"}
        assert components("Rendering 12 of 15 channels") == {"traces"}
        assert components("Loaded waveform") == {"orchestrator"}

    def test_none_record_is_ignored(self, orchestrator, surface, make_record):
        orchestrator.on_data_loaded(make_record())
        previous = orchestrator.matrix

        assert not orchestrator.on_data_loaded(None)
        assert orchestrator.matrix is previous
        assert surface.draw_count == 1

    def test_malformed_record_keeps_previous_matrix(self, orchestrator, surface, make_record):
        orchestrator.on_data_loaded(make_record())
        previous = orchestrator.matrix
        bad = RawWaveformRecord(12, 500, np.zeros(100, dtype=np.uint16))

        with pytest.raises(DecodeError):
            orchestrator.on_data_loaded(bad)

        assert orchestrator.matrix is previous
        assert surface.draw_count == 1

    def test_every_redraw_regenerates_geometry(self, orchestrator, make_record):
        orchestrator.on_data_loaded(make_record())

        first = orchestrator.redraw()
        second = orchestrator.redraw()
        assert first is not second
        assert polylines(first)[0] is not polylines(second)[0]


class TestViewportChanged:
    def test_small_resize_is_ignored(self, orchestrator, surface):
        assert not orchestrator.on_viewport_changed(1210, 740)

        assert surface.draw_count == 0
        assert orchestrator.layout.cell_size == 30
        assert orchestrator.viewport == (1210, 740)

    def test_large_resize_redraws(self, orchestrator, surface):
        assert orchestrator.on_viewport_changed(1600, 960)

        assert surface.draw_count == 1
        assert surface.sizes[-1] == (1600, 960)
        assert orchestrator.layout.cell_size == 40
        assert orchestrator.layout.column_count == 40

    def test_degenerate_resize_raises_and_keeps_state(self, orchestrator, surface):
        layout = orchestrator.layout

        with pytest.raises(LayoutError):
            orchestrator.on_viewport_changed(0, 0)

        assert orchestrator.layout is layout
        assert orchestrator.viewport == (1200, 720)
        assert surface.draw_count == 0


class TestLeadLayoutChanged:
    def test_bookkeeping_event_does_nothing(self, orchestrator, surface):
        assert not orchestrator.on_lead_layout_changed(LeadLayout.L6X2, False)

        assert orchestrator.lead_layout is LeadLayout.REGULAR
        assert surface.draw_count == 0

    def test_selection_redraws(self, orchestrator, surface, make_record):
        orchestrator.on_data_loaded(make_record())

        assert orchestrator.on_lead_layout_changed("3×4")
        assert orchestrator.lead_layout is LeadLayout.L3X4
        assert surface.draw_count == 2
        # no geometry for 3x4 yet: grid only, and the gap is reported
        assert polylines(surface.last) == []
        assert not orchestrator.last_traces.implemented

        orchestrator.on_lead_layout_changed(LeadLayout.REGULAR)
        assert len(polylines(surface.last)) == 12


class TestOpenFile:
    def test_loads_ecg_file(self, orchestrator, surface, ecg_file):
        assert asyncio.run(orchestrator.open_file(ecg_file))

        assert orchestrator.matrix.channel_count == 12
        assert orchestrator.matrix.sample_count == 500
        assert surface.draw_count == 1
        assert not orchestrator.is_loading

    def test_wrong_modality_keeps_previous_matrix(
        self, orchestrator, surface, ecg_file, write_dicom, log_records
    ):
        asyncio.run(orchestrator.open_file(ecg_file))
        previous = orchestrator.matrix
        xa_file = write_dicom(build_ecg_dataset(modality="XA"), "xa.dcm")

        assert not asyncio.run(orchestrator.open_file(xa_file))

        assert orchestrator.matrix is previous
        assert surface.draw_count == 1
        assert levels_of(log_records, "is not a ECG file") == ["INFO"]

    def test_missing_waveform_sequence(self, orchestrator, write_dicom, log_records):
        path = write_dicom(build_ecg_dataset(with_sequence=False), "noseq.dcm")

        assert not asyncio.run(orchestrator.open_file(path))
        assert not orchestrator.has_data
        assert levels_of(log_records, "Waveform Sequence (5400,0100)") == ["INFO"]

    def test_empty_waveform_sequence_is_silent(
        self, orchestrator, surface, write_dicom, log_records
    ):
        path = write_dicom(build_ecg_dataset(n_items=0), "noitems.dcm")

        assert not asyncio.run(orchestrator.open_file(path))
        assert not orchestrator.has_data
        assert surface.draw_count == 0
        assert not [
            r for r in log_records if r["level"].no >= 20 and "Waveform Sequence" in r["message"]
        ]

    def test_invalid_header(self, orchestrator, text_file, log_records):
        assert not asyncio.run(orchestrator.open_file(text_file))
        assert levels_of(log_records, "is not a valid DICOM file") == ["WARNING"]

    def test_missing_file(self, orchestrator, tmp_path, log_records):
        path = str(tmp_path / "missing.dcm")

        assert not asyncio.run(orchestrator.open_file(path))
        assert levels_of(log_records, "is not a valid DICOM file") == ["WARNING"]

    def test_malformed_waveform_data(self, orchestrator, write_dicom, log_records):
        ds = build_ecg_dataset(channels=12, samples=500, raw=b"\x00" * 1000)
        path = write_dicom(ds, "short.dcm")

        assert not asyncio.run(orchestrator.open_file(path))
        assert not orchestrator.has_data
        assert "ERROR" in levels_of(log_records, "Malformed waveform record")

    def test_record_without_waveform_data(self, orchestrator, write_dicom, log_records):
        ds = build_ecg_dataset(channels=12, samples=500)
        del ds.WaveformSequence[0].WaveformData
        path = write_dicom(ds, "nodata.dcm")

        assert not asyncio.run(orchestrator.open_file(path))
        assert not orchestrator.has_data
        assert not orchestrator.is_loading
        assert levels_of(log_records, "missing WaveformData") == ["ERROR"]

    def test_second_open_while_pending_is_rejected(
        self, orchestrator, ecg_file, write_dicom, log_records
    ):
        other = write_dicom(build_ecg_dataset(channels=6, samples=100), "other.dcm")

        async def open_both():
            return await asyncio.gather(
                orchestrator.open_file(ecg_file), orchestrator.open_file(other)
            )

        first, second = asyncio.run(open_both())

        assert first and not second
        assert orchestrator.matrix.channel_count == 12
        assert levels_of(log_records, "Still loading") == ["WARNING"]
        assert not orchestrator.is_loading

    def test_loading_again_after_failure(self, orchestrator, text_file, ecg_file):
        assert not asyncio.run(orchestrator.open_file(text_file))
        assert asyncio.run(orchestrator.open_file(ecg_file))
