"""
Vector Tile Ingester

Turns vector tiles into POI documents and submits them to an index writer.
Tiles are decoded and schemified on a thread pool; documents are submitted
from the calling thread, since the writer transaction is the only shared
resource in the pipeline.
"""

import concurrent.futures
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

import structlog

from ..errors import GeoIndexError, TileDecodeError
from ..indexing.schema import Permute, SchemafiedPoi, schemify
from ..indexing.substitutions import permute_road
from ..indexing.writer import IndexWriter
from ..monitoring.metrics import MetricsCollector
from ..tiles.coordinates import TileSpec
from ..tiles.decoder import decode_tile, features_from_layers
from ..utils.config import Config
from .base_ingester import BaseIngester
from .poi_extractor import extract

TILE_SUFFIXES = ('.mvt', '.pbf')

logger = structlog.get_logger(__name__)


@dataclass
class TileSource:
    """
    A vector tile to ingest.

    Either ``data`` holds the tile bytes or ``path`` points at a file that is
    read when the tile is processed.
    """
    x: int
    y: int
    z: int
    data: Optional[bytes] = None
    path: Optional[Path] = None
    language: Optional[str] = None

    @property
    def spec(self) -> TileSpec:
        return TileSpec(self.x, self.y, self.z)

    @property
    def tile_id(self) -> str:
        return self.spec.tile_id

    def read(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise ValueError(f"Tile {self.tile_id} has neither data nor a path")
        return self.path.read_bytes()

    @classmethod
    def from_path(
        cls,
        path: Union[str, Path],
        root: Union[str, Path],
        language: Optional[str] = None
    ) -> "TileSource":
        """
        Build a source from a ``<root>/<z>/<x>/<y>.mvt`` file path.

        Raises:
            ValueError: If the path does not follow the z/x/y layout
        """
        path = Path(path)
        relative = path.relative_to(root)

        if len(relative.parts) != 3 or path.suffix.lower() not in TILE_SUFFIXES:
            raise ValueError(f"Not a z/x/y tile path: {path}")

        z, x, y = relative.parts[0], relative.parts[1], Path(relative.parts[2]).stem
        try:
            return cls(x=int(x), y=int(y), z=int(z), path=path, language=language)
        except ValueError:
            raise ValueError(f"Not a z/x/y tile path: {path}") from None

    def __str__(self) -> str:
        return self.tile_id


def iter_tile_directory(
    root: Union[str, Path],
    language: Optional[str] = None
) -> Iterator[TileSource]:
    """Yield a TileSource for every z/x/y tile file below ``root``, in path order."""
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Tile directory not found: {root}")

    for path in sorted(root.rglob('*')):
        if not path.is_file() or path.suffix.lower() not in TILE_SUFFIXES:
            continue
        try:
            yield TileSource.from_path(path, root, language)
        except ValueError:
            logger.warning("Skipping file outside the z/x/y layout", path=str(path))


@dataclass
class TileResult:
    """Outcome of processing one tile."""
    tile_id: str
    pois: List[SchemafiedPoi] = field(default_factory=list)
    features_seen: int = 0
    features_dropped: int = 0
    processing_time: float = 0.0


class VectorTileIngester(BaseIngester):
    """
    Ingester for vector tiles.

    Each feature goes through POI extraction and schemification; the
    resulting documents are submitted to the configured ``IndexWriter``.
    """

    def __init__(
        self,
        config: Config,
        writer: IndexWriter,
        permute: Permute = permute_road,
        metrics_collector: Optional[MetricsCollector] = None
    ):
        """
        Initialize the vector tile ingester.

        Args:
            config: Configuration object
            writer: Index writer receiving the documents
            permute: Road permutation collaborator used by schemification
            metrics_collector: Optional metrics collector for monitoring
        """
        super().__init__(config, metrics_collector)

        self.writer = writer
        self.permute = permute
        self.ingestion_config = config.ingestion

        self.logger.info(
            "Vector tile ingester initialized",
            layers=self.ingestion_config.layers or 'all',
            max_workers=self.ingestion_config.max_workers
        )

    def extract(self, source: TileSource) -> Dict[str, Any]:
        """Decode the tile bytes of ``source`` into layers."""
        return decode_tile(source.read(), source.tile_id)

    def validate(self, data: Dict[str, Any]) -> bool:
        """
        Check the decoded layer structure.

        Every layer must be a mapping with a feature list, and a declared
        extent must be a positive integer.
        """
        if not isinstance(data, dict):
            self.logger.error("Decoded tile is not a layer mapping", data_type=type(data).__name__)
            return False

        for layer_name, layer in data.items():
            if not isinstance(layer, dict) or not isinstance(layer.get('features', []), list):
                self.logger.error("Malformed tile layer", layer=layer_name)
                return False

            extent = layer.get('extent')
            if extent is not None and (not isinstance(extent, int) or extent <= 0):
                self.logger.error("Invalid tile layer extent", layer=layer_name, extent=extent)
                return False

        return True

    def transform(self, data: Dict[str, Any], source: TileSource) -> List[SchemafiedPoi]:
        """Extract and schemify the POIs of decoded layers."""
        result = self._transform_layers(data, source)

        self.stats['features_seen'] += result.features_seen
        self.stats['features_dropped'] += result.features_dropped

        return result.pois

    def _transform_layers(self, data: Dict[str, Any], source: TileSource) -> TileResult:
        language = source.language or self.ingestion_config.default_language
        result = TileResult(tile_id=source.tile_id)

        features = features_from_layers(
            data,
            layer_names=self.ingestion_config.layers,
            default_extent=self.ingestion_config.default_extent
        )

        for feature in features:
            result.features_seen += 1

            poi = extract(
                language,
                feature.geometry,
                feature.tags,
                source.x,
                source.y,
                source.z,
                feature.extent
            )

            if poi is None:
                result.features_dropped += 1
                self.logger.debug(
                    "Dropped tile feature",
                    tile_id=source.tile_id,
                    layer=feature.layer,
                    feature_id=feature.feature_id
                )
                continue

            result.pois.append(schemify(poi, self.permute))

        return result

    def process_tile(self, source: TileSource) -> TileResult:
        """
        Decode and schemify one tile without touching the writer.

        Raises:
            TileDecodeError: If the tile cannot be decoded or is malformed
            OSError: If the tile file cannot be read
        """
        start_time = time.time()

        layers = self.extract(source)
        if not self.validate(layers):
            raise TileDecodeError(f"Malformed layers in tile {source.tile_id}", source.tile_id)

        result = self._transform_layers(layers, source)
        result.processing_time = time.time() - start_time

        return result

    def load(self, data: List[SchemafiedPoi]) -> int:
        """
        Submit documents to the index writer.

        Raises:
            InvalidIngestionState: If the writer has no active transaction
        """
        for poi in data:
            self.writer.submit(poi)

        self.stats['pois_submitted'] += len(data)
        self.metrics.increment_counter('pois_submitted', len(data))

        return len(data)

    submit_tile = load

    def _record_tile(self, result: TileResult) -> None:
        self.stats['tiles_processed'] += 1
        self.stats['features_seen'] += result.features_seen
        self.stats['features_dropped'] += result.features_dropped

        self._record_tile_metrics(result)

    def _record_tile_metrics(self, result: TileResult) -> None:
        self.metrics.increment_counter('tiles_processed')
        self.metrics.increment_counter('features_seen', result.features_seen)
        self.metrics.increment_counter('features_dropped', result.features_dropped)
        self.metrics.record_histogram('tile_processing_duration', result.processing_time)

    def _record_tile_failure(self, source: TileSource, error: Exception) -> None:
        self.stats['tiles_failed'] += 1
        self.stats['errors'].append(f"Tile {source.tile_id}: {error}")

        self.metrics.increment_counter('tile_failures', labels={'error_type': type(error).__name__})

        self.logger.error(
            "Error processing tile",
            tile_id=source.tile_id,
            error=str(error),
            error_type=type(error).__name__
        )

    def ingest(self, source: TileSource, validate_data: bool = True) -> Dict[str, Any]:
        """
        Ingest a single tile into the writer's active transaction.

        The writer must already be in an ingestion transaction; otherwise the
        result reports ``InvalidIngestionState``. Tile metrics are recorded
        as for ``ingest_tiles``.
        """
        self.logger.debug("Ingesting tile", tile_id=source.tile_id, center=source.spec.center)

        features_seen = self.stats['features_seen']
        features_dropped = self.stats['features_dropped']
        start_time = time.time()

        result = super().ingest(source, validate_data)
        if result['success']:
            self.stats['tiles_processed'] += 1
            self._record_tile_metrics(TileResult(
                tile_id=source.tile_id,
                features_seen=self.stats['features_seen'] - features_seen,
                features_dropped=self.stats['features_dropped'] - features_dropped,
                processing_time=time.time() - start_time
            ))
        else:
            self.stats['tiles_failed'] += 1
            self.metrics.increment_counter('tile_failures', labels={'error_type': result['error_type']})
        return result

    def ingest_tiles(
        self,
        sources: Iterable[TileSource],
        max_workers: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Ingest many tiles.

        Tiles are processed concurrently. A tile that fails to read or decode
        is logged and skipped so the remaining tiles are still ingested.
        With ``manage_transaction`` enabled the writer transaction is begun
        before the first submission and committed at the end. Any error that
        escapes the run aborts the open transaction and is re-raised.

        Args:
            sources: Tiles to ingest
            max_workers: Thread pool size, defaults to the configured value

        Returns:
            Dictionary containing ingestion results and statistics
        """
        manage_transaction = self.ingestion_config.manage_transaction
        max_workers = max_workers or self.ingestion_config.max_workers

        self.reset_stats()
        self.stats['start_time'] = time.time()

        # Discovery errors must surface before a transaction is opened
        sources = list(sources)

        self.logger.info(
            "Starting tile ingestion",
            tiles=len(sources),
            max_workers=max_workers,
            manage_transaction=manage_transaction
        )

        if manage_transaction:
            self.writer.begin_ingestion()

        committed = None
        try:
            with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
                future_to_source = {
                    executor.submit(self.process_tile, source): source
                    for source in sources
                }

                for future in concurrent.futures.as_completed(future_to_source):
                    source = future_to_source[future]

                    try:
                        result = future.result()
                    except (GeoIndexError, OSError, ValueError) as e:
                        self._record_tile_failure(source, e)
                        continue

                    self._record_tile(result)
                    self.load(result.pois)

            if manage_transaction:
                committed = self.writer.commit()

        except Exception as e:
            if manage_transaction and self.writer.is_active:
                self.writer.abort()
            self.metrics.increment_counter('ingestion_failure')
            self.logger.error("Tile ingestion aborted", error=str(e), error_type=type(e).__name__)
            raise

        self.stats['end_time'] = time.time()
        duration = self.stats['end_time'] - self.stats['start_time']

        self.metrics.increment_counter('ingestion_success')
        self.metrics.record_histogram('ingestion_duration', duration)

        self.logger.info(
            "Tile ingestion completed",
            tiles_processed=self.stats['tiles_processed'],
            tiles_failed=self.stats['tiles_failed'],
            pois_submitted=self.stats['pois_submitted'],
            duration_seconds=duration
        )

        return {
            'success': self.stats['tiles_failed'] == 0,
            'stats': self.stats,
            'committed': committed,
            'message': (
                f"Ingested {self.stats['tiles_processed']} tiles, "
                f"{self.stats['tiles_failed']} failed"
            )
        }
