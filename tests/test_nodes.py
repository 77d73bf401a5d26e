import pytest

from treetalk.errors import ImageError
from treetalk.nodes import (KIND_INST_VAR, PAnswer, PBlock, PLiteralArray,
    PMethod, PReference, PSend, PSuper, answer, arg, assignInst, block,
    fromJson, inst, lit, send, sym, temp)


def sampleMethod():
  # count: n  | t | t := [:x | ^super foo: x] value: #(1 'a' #b). ^count
  return PMethod("count:", ["n"], ["t"], [
      send(block(["x"], [], answer(send(PSuper(), "foo:", arg("x")))),
        "value:", PLiteralArray([lit(1), lit("a"), sym("b")])),
      assignInst("count", 2, temp("t")),
      answer(inst("count", 2)),
      ], primitive=60)


def test_method_survives_json():
  original = sampleMethod()
  rebuilt = fromJson(original.emit())
  assert isinstance(rebuilt, PMethod)
  assert rebuilt.emit() == original.emit()
  assert rebuilt.primitive == 60
  assert rebuilt.body.temps == ["t"]


def test_rebuilt_nodes_keep_their_kinds():
  rebuilt = fromJson(sampleMethod().emit())
  first = rebuilt.body.statements[0]
  assert isinstance(first, PSend)
  assert isinstance(first.receiver, PBlock)
  inner = first.receiver.body.statements[0]
  assert isinstance(inner, PAnswer)
  assert inner.expr.isSuperSend
  last = rebuilt.body.statements[-1].expr
  assert isinstance(last, PReference)
  assert last.kind == KIND_INST_VAR and last.index == 2


def test_super_send_flag():
  assert send(PSuper(), "foo").isSuperSend
  assert not send(lit(1), "foo").isSuperSend


def test_unknown_node_type():
  with pytest.raises(ImageError):
    fromJson({"node": "goto"})


def test_missing_field():
  with pytest.raises(ImageError):
    fromJson({"node": "send", "selector": "foo"})


def test_bad_reference_kind():
  with pytest.raises(ImageError):
    fromJson({"node": "reference", "name": "x", "kind": "register"})
  with pytest.raises(ValueError):
    PReference("x", "register")


def test_not_a_node():
  with pytest.raises(ImageError):
    fromJson([1, 2])


def test_list_literal_becomes_literal_array():
  node = fromJson({"node": "literal", "value": [1, ["a", None]]})
  assert isinstance(node, PLiteralArray)
  assert isinstance(node.elements[1], PLiteralArray)
  assert node.elements[1].elements[0].value == "a"


@pytest.mark.parametrize("value", [{"a": 1}, [1, {"b": 2}]])
def test_literal_without_literal_form(value):
  with pytest.raises(ImageError):
    fromJson({"node": "literal", "value": value})


def test_symbol_must_be_a_string():
  with pytest.raises(ImageError):
    fromJson({"node": "symbol", "value": 3})
