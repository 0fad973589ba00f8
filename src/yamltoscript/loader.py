# loader.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .errors import GenerationError
from .model import CommandStep, Job, PipelineDefinition, Step, TemplateDefinition, TemplateStep


# ---------------------------------------------------------------------
# Node tree
# ---------------------------------------------------------------------
# YAML is parsed into three node kinds and nothing else. Everything below
# walks this tree instead of probing raw dicts.

@dataclass(frozen=True)
class ScalarNode:
    value: Any  # str | int | float | bool | None


@dataclass(frozen=True)
class SeqNode:
    items: Tuple[Node, ...]


@dataclass(frozen=True)
class MapNode:
    entries: Dict[str, Node]

    def get(self, key: str) -> Optional[Node]:
        return self.entries.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self.entries


Node = Union[MapNode, SeqNode, ScalarNode]


def to_node(raw: Any) -> Node:
    if isinstance(raw, dict):
        return MapNode({str(k): to_node(v) for k, v in raw.items()})
    if isinstance(raw, (list, tuple)):
        return SeqNode(tuple(to_node(v) for v in raw))
    return ScalarNode(raw)


def from_node(node: Node) -> Any:
    if isinstance(node, MapNode):
        return {k: from_node(v) for k, v in node.entries.items()}
    if isinstance(node, SeqNode):
        return [from_node(v) for v in node.items]
    return node.value


def render_value(node: Node) -> str:
    """Render a parameter value as the literal text substituted into commands."""
    if isinstance(node, ScalarNode):
        value = node.value
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
    return yaml.safe_dump(from_node(node), default_flow_style=True).strip()


# ---------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------

def load_definition(path: str | Path) -> MapNode:
    """
    Read and parse a pipeline or template file.

    Raises GenerationError(kind="DefinitionLoadError") when the file can't be
    read, isn't valid YAML, or its top level is not a mapping.
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise GenerationError(
            kind="DefinitionLoadError",
            message=f"Could not read definition file: {e.strerror or e}",
            path=str(p),
        ) from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise GenerationError(
            kind="DefinitionLoadError",
            message="Definition file is not valid YAML",
            path=str(p),
            details={"error": str(e).replace("\n", " ")},
        ) from e

    node = to_node(raw if raw is not None else {})
    if not isinstance(node, MapNode):
        raise GenerationError(
            kind="DefinitionLoadError",
            message="Top level of a definition file must be a mapping",
            path=str(p),
        )
    return node


# ---------------------------------------------------------------------
# Node tree -> model
# ---------------------------------------------------------------------

def _scalar_str(node: Optional[Node]) -> Optional[str]:
    if isinstance(node, ScalarNode) and node.value is not None:
        return render_value(node)
    return None


def _items(node: Optional[Node]) -> Tuple[Node, ...]:
    return node.items if isinstance(node, SeqNode) else ()


def parse_parameters(node: Optional[Node]) -> Dict[str, str]:
    """Reference-site parameters: `parameters: {name: value}`."""
    if not isinstance(node, MapNode):
        return {}
    return {name: render_value(value) for name, value in node.entries.items()}


def parse_declared_parameters(node: Optional[Node]) -> List[str]:
    """
    Parameter names a template declares.

    Accepts the mapping form (`name: default`) and the list form
    (`- name: x`). Every declared name is required at the reference site.
    """
    if isinstance(node, MapNode):
        return list(node.entries)
    names: List[str] = []
    for item in _items(node):
        if isinstance(item, MapNode):
            name = _scalar_str(item.get("name"))
            if name:
                names.append(name)
        else:
            name = _scalar_str(item)
            if name:
                names.append(name)
    return names


def parse_step(node: Node) -> Step:
    if not isinstance(node, MapNode):
        return Step()

    template = None
    reference = _scalar_str(node.get("template"))
    if reference:
        template = TemplateStep(
            reference=reference,
            parameters=parse_parameters(node.get("parameters")),
        )

    script = None
    inputs = node.get("inputs")
    if isinstance(inputs, MapNode):
        script = _scalar_str(inputs.get("script"))
    if script is None:
        # `- script: ...` shorthand for CmdLine@2
        script = _scalar_str(node.get("script"))

    command = None
    if script is not None:
        command = CommandStep(
            script=script,
            display_name=_scalar_str(node.get("displayName")),
            task=_scalar_str(node.get("task")),
        )

    return Step(template=template, command=command)


def parse_steps(node: Optional[Node]) -> List[Step]:
    return [parse_step(item) for item in _items(node)]


def parse_job(node: Node) -> Job:
    if not isinstance(node, MapNode):
        return Job(name="", steps=[])
    name = _scalar_str(node.get("job")) or _scalar_str(node.get("deployment")) or ""
    return Job(name=name, steps=parse_steps(node.get("steps")))


def parse_pipeline(node: MapNode, path: str | Path | None = None) -> PipelineDefinition:
    jobs = node.get("jobs")
    if not isinstance(jobs, SeqNode):
        raise GenerationError(
            kind="MissingJobsKey",
            message="No jobs found in the YAML file. Not a valid pipeline definition.",
            path=str(path) if path is not None else None,
        )
    return PipelineDefinition(jobs=[parse_job(j) for j in jobs.items])


def parse_template(node: MapNode) -> TemplateDefinition:
    return TemplateDefinition(
        parameters=parse_declared_parameters(node.get("parameters")),
        steps=parse_steps(node.get("steps")),
    )


def load_pipeline(path: str | Path) -> PipelineDefinition:
    return parse_pipeline(load_definition(path), path)


def load_template(path: str | Path) -> TemplateDefinition:
    return parse_template(load_definition(path))
