import pytest

from yamltoscript.errors import GenerationError
from yamltoscript.loader import (
    MapNode,
    ScalarNode,
    SeqNode,
    load_definition,
    load_pipeline,
    parse_declared_parameters,
    parse_step,
    render_value,
    to_node,
)


def test_to_node_builds_tagged_tree():
    node = to_node({"a": [1, {"b": None}]})
    assert isinstance(node, MapNode)
    seq = node.get("a")
    assert isinstance(seq, SeqNode)
    assert seq.items[0] == ScalarNode(1)
    assert isinstance(seq.items[1], MapNode)


def test_render_value():
    assert render_value(ScalarNode(True)) == "true"
    assert render_value(ScalarNode(False)) == "false"
    assert render_value(ScalarNode(3)) == "3"
    assert render_value(ScalarNode(None)) == ""
    assert render_value(ScalarNode("x")) == "x"
    assert render_value(to_node(["a", "b"])) == "[a, b]"


def test_load_pipeline_reads_jobs_and_steps(write_yaml):
    path = write_yaml("pipeline.yml", """
        jobs:
          - job: build
            steps:
              - task: CmdLine@2
                displayName: Say hi
                inputs:
                  script: echo hi
              - template: templates/t.yml
                parameters:
                  target: android
                  release: true
          - job: empty
    """)
    pipeline = load_pipeline(path)
    assert [j.name for j in pipeline.jobs] == ["build", "empty"]

    first, second = pipeline.jobs[0].steps
    assert first.command.script == "echo hi"
    assert first.command.name == "Say hi"
    assert first.command.task == "CmdLine@2"
    assert first.template is None
    assert second.template.reference == "templates/t.yml"
    assert second.template.parameters == {"target": "android", "release": "true"}
    assert pipeline.jobs[1].steps == []


def test_missing_jobs_key_is_fatal(write_yaml):
    path = write_yaml("pipeline.yml", """
        steps:
          - script: echo hi
    """)
    with pytest.raises(GenerationError) as exc:
        load_pipeline(path)
    assert exc.value.kind == "MissingJobsKey"


def test_unreadable_file(tmp_path):
    with pytest.raises(GenerationError) as exc:
        load_definition(tmp_path / "nope.yml")
    assert exc.value.kind == "DefinitionLoadError"


def test_malformed_yaml(write_yaml):
    path = write_yaml("bad.yml", "jobs: [\n")
    with pytest.raises(GenerationError) as exc:
        load_definition(path)
    assert exc.value.kind == "DefinitionLoadError"


def test_top_level_must_be_mapping(write_yaml):
    path = write_yaml("list.yml", "- a\n- b\n")
    with pytest.raises(GenerationError) as exc:
        load_definition(path)
    assert exc.value.kind == "DefinitionLoadError"


def test_step_with_template_and_command():
    step = parse_step(to_node({
        "template": "t.yml",
        "displayName": "Both",
        "inputs": {"script": "make"},
    }))
    assert step.template.reference == "t.yml"
    assert step.template.parameters == {}
    assert step.command.script == "make"


def test_script_shorthand_is_a_command():
    step = parse_step(to_node({"script": "npm test", "displayName": "Test"}))
    assert step.command.script == "npm test"
    assert step.command.task is None
    assert step.command.is_supported


def test_step_without_display_name_gets_placeholder():
    step = parse_step(to_node({"task": "CmdLine@2", "inputs": {"script": "ls"}}))
    assert step.command.name == "Command without display name"


def test_step_without_script_has_no_command():
    step = parse_step(to_node({"task": "PublishBuildArtifacts@1", "inputs": {"path": "out"}}))
    assert step.command is None
    assert step.template is None


def test_declared_parameters_mapping_and_list_forms():
    assert parse_declared_parameters(to_node({"target": "", "abi": None})) == ["target", "abi"]
    assert parse_declared_parameters(
        to_node([{"name": "target", "type": "string"}, {"name": "abi"}])
    ) == ["target", "abi"]
    assert parse_declared_parameters(None) == []
