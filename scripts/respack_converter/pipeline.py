"""
Conversion pipeline coordinator.
Sequences manifest fetch, classification, downloads, routing, descriptor
synthesis and persistence, recording per-step state.
"""

import time
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass, field

from .config import ConverterConfig
from .providers import provider_registry
from .providers.base import ResourceProvider, ResourceManifest, FetchedAsset
from .processing.classifier import NameClassifier, SemanticRole
from .processing.transcoder import ImageTranscoder
from .processing.router import AssetRouter, RoutedAssets
from .processing.descriptor import DescriptorSynthesizer, PackDescriptor


class PipelineStep(Enum):
    """Enumeration of pipeline steps, in execution order."""
    FETCH_MANIFEST = "fetch_manifest"
    CLASSIFY = "classify"
    FETCH_ASSETS = "fetch_assets"
    ROUTE = "route"
    SYNTHESIZE = "synthesize"
    PERSIST = "persist"


@dataclass
class StepResult:
    """Result of a pipeline step execution."""
    step: PipelineStep
    success: bool
    duration: float
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)


@dataclass
class PipelineState:
    """Current state of the pipeline execution."""
    source_url: str = ""
    current_step: Optional[PipelineStep] = None
    completed_steps: List[PipelineStep] = field(default_factory=list)
    failed_step: Optional[PipelineStep] = None
    step_results: Dict[PipelineStep, StepResult] = field(default_factory=dict)
    start_time: Optional[float] = None
    manifest: Optional[ResourceManifest] = None
    classified: Dict[SemanticRole, str] = field(default_factory=dict)
    unrecognized: List[str] = field(default_factory=list)
    assets: List[FetchedAsset] = field(default_factory=list)
    routed: Optional[RoutedAssets] = None
    descriptor: Optional[PackDescriptor] = None
    output_dir: Optional[Path] = None
    written_files: List[Path] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None and PipelineStep.PERSIST in self.completed_steps


class PipelineError(Exception):
    """Base exception for pipeline errors."""
    def __init__(self, message: str, step: Optional[PipelineStep] = None):
        super().__init__(message)
        self.step = step


class ConversionPipeline:
    """
    Converts a PT resource pack into the target pack layout.

    Every step runs in order; the first error stops the run and is re-raised
    unchanged. Files already written are left in place.
    """

    def __init__(self, config: Optional[ConverterConfig] = None,
                 provider: Optional[ResourceProvider] = None):
        """
        Initialize the pipeline.

        Args:
            config: Converter configuration, defaults apply when omitted
            provider: Resource provider, created from config.provider when omitted
        """
        self.config = config or ConverterConfig()
        self.logger = self._setup_logging()

        self.provider = provider or provider_registry.create_provider(
            self.config.provider, self.config.provider_config()
        )
        self.classifier = NameClassifier()
        self.transcoder = ImageTranscoder(
            strict_frames=self.config.strict_hit_effect_frames,
            compress_level=self.config.compression_level
        )
        self.router = AssetRouter(self.transcoder)
        self.synthesizer = DescriptorSynthesizer(
            layout=self.transcoder.layout,
            strict_atlas_consistency=self.config.strict_atlas_consistency,
            filename=self.config.descriptor_filename
        )

        self.state = PipelineState()
        self._step_handlers: Dict[PipelineStep, Callable[[], Dict[str, Any]]] = {
            PipelineStep.FETCH_MANIFEST: self._execute_fetch_manifest_step,
            PipelineStep.CLASSIFY: self._execute_classify_step,
            PipelineStep.FETCH_ASSETS: self._execute_fetch_assets_step,
            PipelineStep.ROUTE: self._execute_route_step,
            PipelineStep.SYNTHESIZE: self._execute_synthesize_step,
            PipelineStep.PERSIST: self._execute_persist_step,
        }

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the pipeline."""
        logger = logging.getLogger("respack_converter")
        logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def run(self, url: str) -> PipelineState:
        """
        Run the full conversion for the manifest at url.

        Returns:
            Final pipeline state

        Raises:
            ManifestParseError, FetchError, DecodeError, OSError: first failure
        """
        return self._run_steps(url, list(PipelineStep))

    def inspect(self, url: str) -> PipelineState:
        """Fetch and classify the manifest without downloading resources."""
        return self._run_steps(url, [PipelineStep.FETCH_MANIFEST, PipelineStep.CLASSIFY])

    def _run_steps(self, url: str, steps: List[PipelineStep]) -> PipelineState:
        self.state = PipelineState(source_url=url, start_time=time.time())
        self.logger.info(f"Starting conversion of {url}")

        for step in steps:
            self._execute_step(step)

        total = time.time() - self.state.start_time
        self.logger.info(f"Finished {len(steps)} steps in {total:.2f}s")
        return self.state

    def _execute_step(self, step: PipelineStep) -> None:
        """Execute a single pipeline step with timing and state recording."""
        self.state.current_step = step
        self.logger.info(f"Executing step: {step.value}")
        start_time = time.time()

        try:
            data = self._step_handlers[step]()
        except Exception as e:
            duration = time.time() - start_time
            self.state.step_results[step] = StepResult(
                step=step,
                success=False,
                duration=duration,
                message=f"Step {step.value} failed: {e}",
                errors=[str(e)]
            )
            self.state.failed_step = step
            self.logger.error(f"Step {step.value} failed after {duration:.2f}s: {e}")
            raise

        duration = time.time() - start_time
        self.state.step_results[step] = StepResult(
            step=step,
            success=True,
            duration=duration,
            message=f"Step {step.value} completed successfully",
            data=data
        )
        self.state.completed_steps.append(step)
        self.logger.info(f"Step {step.value} completed in {duration:.2f}s")

    def _require(self, value, step: PipelineStep):
        if value is None:
            raise PipelineError(f"Step {step.value} requires an earlier step to run first", step)
        return value

    # Step execution methods
    def _execute_fetch_manifest_step(self) -> Dict[str, Any]:
        manifest = self.provider.fetch_manifest(self.state.source_url)
        self.state.manifest = manifest
        return {"name": manifest.name, "author": manifest.author, "resources": len(manifest.resources)}

    def _execute_classify_step(self) -> Dict[str, Any]:
        manifest = self._require(self.state.manifest, PipelineStep.CLASSIFY)
        self.state.classified = self.classifier.classify_manifest(manifest.resources)
        self.state.unrecognized = self.classifier.unrecognized(manifest.resources)

        if self.state.unrecognized:
            self.logger.info(f"Ignoring {len(self.state.unrecognized)} unsupported resources")
        return {
            "classified": len(self.state.classified),
            "unrecognized": len(self.state.unrecognized),
        }

    def _execute_fetch_assets_step(self) -> Dict[str, Any]:
        self.state.assets = self.provider.fetch_all(self.state.classified)
        return {
            "downloaded": len(self.state.assets),
            "bytes": sum(asset.size for asset in self.state.assets),
        }

    def _execute_route_step(self) -> Dict[str, Any]:
        self.state.routed = self.router.route(self.state.assets)
        return {
            "outputs": self.state.routed.filenames,
            "hold_components": len(self.state.routed.hold_components),
        }

    def _execute_synthesize_step(self) -> Dict[str, Any]:
        manifest = self._require(self.state.manifest, PipelineStep.SYNTHESIZE)
        routed = self._require(self.state.routed, PipelineStep.SYNTHESIZE)

        self.state.descriptor = self.synthesizer.synthesize(
            manifest.name,
            manifest.author,
            routed.hold_components,
            routed.hit_effect_produced,
            routed.combined_roles,
        )
        return self.state.descriptor.to_dict()

    def _execute_persist_step(self) -> Dict[str, Any]:
        """Write every output file, then the descriptor describing them."""
        manifest = self._require(self.state.manifest, PipelineStep.PERSIST)
        routed = self._require(self.state.routed, PipelineStep.PERSIST)
        descriptor = self._require(self.state.descriptor, PipelineStep.PERSIST)

        output_dir = Path(self.config.output_root) / manifest.name
        output_dir.mkdir(parents=True, exist_ok=True)
        self.state.output_dir = output_dir

        for filename, data in routed.outputs.items():
            path = output_dir / filename
            with open(path, 'wb') as f:
                f.write(data)
            self.state.written_files.append(path)
            self.logger.info(f"Wrote {path} ({len(data)} bytes)")

        self.state.written_files.append(self.synthesizer.write(descriptor, output_dir))
        return {
            "output_dir": str(output_dir),
            "files": [path.name for path in self.state.written_files],
        }
