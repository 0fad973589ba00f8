from .model import Job, Step, TemplateStep, CommandStep, ExclusionRules, PipelineDefinition, TemplateDefinition
from .config import GeneratorOptions
from .errors import GenerationError, ConfigError
from .processor import generate_script, GenerationResult
from .script_builder import ScriptBuilder, ScriptOptions
from .sanitizer import sanitize_command

__all__ = [
    "Job",
    "Step",
    "TemplateStep",
    "CommandStep",
    "ExclusionRules",
    "PipelineDefinition",
    "TemplateDefinition",
    "GeneratorOptions",
    "GenerationError",
    "ConfigError",
    "generate_script",
    "GenerationResult",
    "ScriptBuilder",
    "ScriptOptions",
    "sanitize_command",
]
