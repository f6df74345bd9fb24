"""
High-level entry points tying the pipeline together.

The pipeline has four stages, each usable on its own:

    parse_records() -> build_index() -> extract_catalog() / align_series()

:class:`ComparisonSession` holds the state an interactive front end needs
(the current index and the current selection) and recomputes catalog and
alignment from them on every read, so a result can never be stale.

Usage Example:
    >>> session = ComparisonSession()
    >>> session.ingest_file("runs.csv")
    >>> session.catalog.metrics
    ('loss', 'accuracy')
    >>> session.select_metric("loss")
    >>> session.toggle_experiment("E1")
    >>> session.aligned().steps
    (0, 1, 2)
"""

from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from matplotlib.figure import Figure

from runcompare import logger
from runcompare.alignment.aligner import AlignedSeriesSet, Selection, align_selection, align_series
from runcompare.catalog.extractor import Catalog, extract_catalog
from runcompare.config.models import RunCompareConfig
from runcompare.config.yaml_config import ConfigSource, load_config
from runcompare.index.builder import MetricIndex, build_index
from runcompare.io.records import parse_records, read_records
from runcompare.render.chart import export_image, render_figure


def load_index(file_path: Union[str, Path], config: ConfigSource = None) -> MetricIndex:
    """
    Read a CSV file and build its index in one call.

    Args:
        file_path: Tabular input file
        config: Configuration source accepted by :func:`load_config`

    Returns:
        The built index

    Raises:
        ParseError: If the file cannot be read or its header is invalid
        ConfigError: If the configuration is invalid
    """
    cfg = load_config(config)
    return build_index(read_records(file_path, cfg.ingest), cfg.ingest)


def compare(
    file_path: Union[str, Path],
    metric: str,
    experiments: Sequence[str],
    config: ConfigSource = None,
) -> Optional[AlignedSeriesSet]:
    """
    Load a file and align ``experiments`` for ``metric``.

    Returns:
        The aligned set, or ``None`` when the selection is empty or the
        metric is not present in the file
    """
    cfg = load_config(config)
    return align_series(load_index(file_path, cfg), metric, experiments)


class ComparisonSession:
    """
    Index plus selection for one interactive comparison.

    Ingesting new input replaces the index wholesale and clears the
    experiment selection; the chosen metric survives only if the new index
    still knows it. A failed ingestion leaves the previous state untouched.
    """

    def __init__(self, config: ConfigSource = None):
        self._config: RunCompareConfig = load_config(config)
        self._index = MetricIndex.empty()
        self._selection = Selection()
        self._source: Optional[str] = None

    @property
    def config(self) -> RunCompareConfig:
        return self._config

    @property
    def index(self) -> MetricIndex:
        return self._index

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def source(self) -> Optional[str]:
        """Description of the last successfully ingested input."""
        return self._source

    @property
    def catalog(self) -> Catalog:
        return extract_catalog(self._index)

    # --- Ingestion ---

    def ingest_text(self, text: str, source: str = "<text>") -> MetricIndex:
        """
        Parse and index ``text``, replacing the current index.

        Raises:
            ParseError: If the header is invalid; the session is unchanged
        """
        records = parse_records(text, self._config.ingest)
        return self._replace_index(build_index(records, self._config.ingest), source)

    def ingest_file(self, file_path: Union[str, Path]) -> MetricIndex:
        """
        Read, parse and index a file, replacing the current index.

        Raises:
            ParseError: If the file is unreadable or its header is invalid;
                the session is unchanged
        """
        records = read_records(file_path, self._config.ingest)
        return self._replace_index(build_index(records, self._config.ingest), str(file_path))

    def _replace_index(self, index: MetricIndex, source: str) -> MetricIndex:
        metric = self._selection.metric if index.has_metric(self._selection.metric) else None
        self._index = index
        self._selection = Selection(metric=metric)
        self._source = source
        logger.info(f"Session now holds {source}: {index!r}")
        return index

    # --- Selection ---

    def search_experiments(self, query: str):
        return self.catalog.search_experiments(query)

    def select_metric(self, metric_name: Optional[str]) -> Selection:
        self._selection = self._selection.with_metric(metric_name)
        return self._selection

    def toggle_experiment(self, experiment_id: str) -> Selection:
        self._selection = self._selection.toggle(experiment_id)
        return self._selection

    def select_experiments(self, experiment_ids: Iterable[str]) -> Selection:
        self._selection = self._selection.with_experiments(experiment_ids)
        return self._selection

    def clear_selection(self) -> Selection:
        self._selection = self._selection.clear()
        return self._selection

    # --- Derived results ---

    def aligned(self) -> Optional[AlignedSeriesSet]:
        """Current alignment, recomputed from the index and selection."""
        return align_selection(self._index, self._selection)

    def render(self) -> Optional[Figure]:
        aligned = self.aligned()
        if aligned is None:
            return None
        return render_figure(aligned, self._config.chart)

    def export_image(self, path: Optional[Union[str, Path]] = None) -> Optional[bytes]:
        """
        Encode the current chart; ``None`` when there is nothing to draw.

        Raises:
            RenderError: If rendering or writing fails
        """
        aligned = self.aligned()
        if aligned is None:
            logger.debug("Nothing selected, no chart to export")
            return None
        return export_image(aligned, self._config.chart, path)


__all__ = ["ComparisonSession", "compare", "load_index"]
