import pytest

from treetalk.errors import (ArityMismatch, DeadFrameReturn, DoesNotUnderstand,
    InterpreterError, NoClassForValue, UnresolvedGlobal, UnresolvedVariable)
from treetalk.frames import BlockClosure, Frame
from treetalk.kernel import method
from treetalk.nodes import (PLiteralArray, PSelf, PSequence, PSuper, answer,
    arg, assignGlobal, assignInst, assignTemp, block, fromJson, glob, inst,
    lit, send, sym, temp)
from treetalk.objects import STObject, Symbol

SELF = PSelf()
SUPER = PSuper()


# Literals

def test_literal_array_keeps_nesting(doit):
  node = PLiteralArray([lit(True), lit(1), PLiteralArray([lit("ahah")])])
  assert doit(node) == [True, 1, ["ahah"]]


def test_literals_ignore_the_receiver(interp, doit):
  node = PLiteralArray([lit(3), lit("x")])
  assert doit(node, receiver=42) == doit(node, receiver=None)


def test_literal_array_is_fresh_each_time(interp):
  node = PLiteralArray([lit(1)])
  frame = Frame(None, None)
  first = interp.evaluate(node, frame)
  first.append(2)
  assert interp.evaluate(node, frame) == [1]


def test_symbol_literal(doit):
  value = doit(sym("foo:bar:"))
  assert isinstance(value, Symbol)
  assert value == "foo:bar:"


def test_unknown_node_is_fatal(interp):
  with pytest.raises(InterpreterError):
    interp.evaluate(object(), Frame(None, None))


# self and super

def test_self_and_super_are_the_same_receiver(interp, doit, newClass):
  obj = interp.send(newClass("Thing"), "new")
  assert doit(SELF, receiver=obj) is obj
  assert doit(SUPER, receiver=obj) is obj


@pytest.fixture
def abc(interp, newClass):
  # A <- B <- C, each answering its own name; B also asks super.
  newClass("A", methods=[method("name", (), (), answer(lit("A")))])
  newClass("B", "A", methods=[
      method("name", (), (), answer(lit("B"))),
      method("superName", (), (), answer(send(SUPER, "name"))),
      method("superSelf", (), (), answer(send(SUPER, "yourself"))),
      ])
  return newClass("C", "B", methods=[method("name", (), (), answer(lit("C")))])


def test_super_starts_above_the_defining_class(interp, abc):
  c = interp.send(abc, "new")
  assert interp.send(c, "name") == "C"
  # superName is defined in B, so super means A even though c is a C.
  assert interp.send(c, "superName") == "A"


def test_super_send_keeps_the_receiver(interp, abc):
  c = interp.send(abc, "new")
  assert interp.send(c, "superSelf") is c


def test_super_send_without_inherited_method(interp, newClass):
  cls = newClass("Lonely", methods=[
      method("go", (), (), answer(send(SUPER, "frobnicate")))])
  with pytest.raises(DoesNotUnderstand) as info:
    interp.send(interp.send(cls, "new"), "go")
  assert info.value.selector == "frobnicate"


# Instance variables

@pytest.fixture
def point(newClass):
  return newClass("Point", ivars=["x", "y"], methods=[
      method("x", (), (), answer(inst("x", 0))),
      method("y", (), (), answer(inst("y", 1))),
      method("x:", ["ax"], (), assignInst("x", 0, arg("ax"))),
      method("setY:", ["ay"], (), answer(assignInst("y", 1, arg("ay")))),
      ])


def test_instance_variable_write_then_read(interp, point):
  p = interp.send(point, "new")
  assert interp.send(p, "x") is None
  interp.send(p, "x:", [3])
  assert interp.send(p, "x") == 3


def test_instances_do_not_share_slots(interp, point):
  p = interp.send(point, "new")
  q = interp.send(point, "new")
  interp.send(p, "x:", [1])
  interp.send(q, "x:", [2])
  assert interp.send(p, "x") == 1
  assert interp.send(q, "x") == 2


def test_assignment_answers_the_written_value(interp, point):
  p = interp.send(point, "new")
  interp.send(p, "setY:", [5])
  assert interp.send(p, "setY:", [9]) == 9


def test_instance_variables_need_an_object(interp):
  with pytest.raises(InterpreterError):
    interp.executeMethod(method("x", (), (), answer(inst("x", 0))), 3)


# Method and block results

def test_method_without_return_answers_receiver(interp, newClass):
  cls = newClass("Quiet", methods=[method("noop", (), (), lit(3), lit(4))])
  obj = interp.send(cls, "new")
  assert interp.send(obj, "noop") is obj


def test_empty_method_answers_receiver(interp):
  assert interp.executeMethod(method("nothing"), 17) == 17


def test_block_answers_last_statement(doit):
  assert doit(send(block([], [], lit(1), lit(5)), "value")) == 5


def test_empty_block_answers_nil(doit):
  assert doit(send(block(), "value")) is None


def test_block_literal_is_not_run(interp, doit):
  closure = doit(block([], [], assignGlobal("Touched", lit(True))))
  assert isinstance(closure, BlockClosure)
  assert not interp.globals.has("Touched")


def test_block_parameters(doit):
  minus = block(["a", "b"], [], send(arg("a"), "-", arg("b")))
  assert doit(send(minus, "value:value:", lit(10), lit(3))) == 7


def test_block_temps_start_nil_on_every_call(doit):
  # [:v | | x | x isNil ifTrue: [x := v]. x]
  b = block(["v"], ["x"],
      send(send(temp("x"), "isNil"), "ifTrue:",
        block([], [], assignTemp("x", arg("v")))),
      temp("x"))
  assert doit(assignTemp("b", b),
      send(temp("b"), "value:", lit(1)),
      send(temp("b"), "value:", lit(2)), temps=["b"]) == 2


def test_block_runs_with_defining_receiver(interp, newClass):
  cls = newClass("Holder", methods=[
      method("selfInBlock", (), (), answer(send(block([], [], SELF), "value")))])
  obj = interp.send(cls, "new")
  assert interp.send(obj, "selfInBlock") is obj


# Closures share their defining frame

def test_closure_mutates_outer_temp(interp, newClass):
  # | t b | t := 0. b := [t := t + 1]. b value. b value. ^t
  cls = newClass("Counter", methods=[
      method("count", (), ["t", "b"],
        assignTemp("t", lit(0)),
        assignTemp("b", block([], [],
          assignTemp("t", send(temp("t"), "+", lit(1))))),
        send(temp("b"), "value"),
        send(temp("b"), "value"),
        answer(temp("t")))])
  assert interp.send(interp.send(cls, "new"), "count") == 2


def test_sibling_closures_see_each_others_writes(doit):
  # | n inc get | n := 0. inc := [n := n + 10]. get := [n]. inc value. get value
  assert doit(
      assignTemp("n", lit(0)),
      assignTemp("inc", block([], [],
        assignTemp("n", send(temp("n"), "+", lit(10))))),
      assignTemp("get", block([], [], temp("n"))),
      send(temp("inc"), "value"),
      send(temp("get"), "value"),
      temps=["n", "inc", "get"]) == 10


def test_closure_outlives_its_method(interp, newClass):
  # makeCounter | n | n := 0. ^[n := n + 1]
  cls = newClass("Factory", methods=[
      method("makeCounter", (), ["n"],
        assignTemp("n", lit(0)),
        answer(block([], [], assignTemp("n", send(temp("n"), "+", lit(1))))))])
  factory = interp.send(cls, "new")
  first = interp.send(factory, "makeCounter")
  second = interp.send(factory, "makeCounter")
  assert interp.send(first, "value") == 1
  assert interp.send(first, "value") == 2
  assert interp.send(second, "value") == 1
  assert first.definingFrame is not second.definingFrame


def test_nested_blocks_reach_the_method_frame(doit):
  # | x | x := 1. [[x := x + 1] value] value. x
  inner = block([], [], assignTemp("x", send(temp("x"), "+", lit(1))))
  outer = block([], [], send(inner, "value"))
  assert doit(assignTemp("x", lit(1)), send(outer, "value"), temp("x"),
      temps=["x"]) == 2


# Temporaries of unrelated activations

def test_same_named_temps_do_not_alias(interp, newClass):
  cls = newClass("Aliasing", methods=[
      method("outer", (), ["temp"],
        assignTemp("temp", lit(1)),
        send(SELF, "inner"),
        answer(temp("temp"))),
      method("inner", (), ["temp"],
        assignTemp("temp", lit(1987)),
        answer(temp("temp"))),
      ])
  assert interp.send(interp.send(cls, "new"), "outer") == 1


def test_recursive_activations_have_their_own_temps(interp, newClass):
  # recur: n | t | t := n. n > 0 ifTrue: [self recur: n - 1]. ^t
  cls = newClass("Recur", methods=[
      method("recur:", ["n"], ["t"],
        assignTemp("t", arg("n")),
        send(send(arg("n"), ">", lit(0)), "ifTrue:",
          block([], [], send(SELF, "recur:", send(arg("n"), "-", lit(1))))),
        answer(temp("t")))])
  assert interp.send(interp.send(cls, "new"), "recur:", [3]) == 3


# Non-local return

@pytest.fixture
def guard(newClass):
  # guard: cond  cond ifTrue: [^nil]. ^self expensive
  # expensive    called := true. ^42
  return newClass("Guard", ivars=["called"], methods=[
      method("guard:", ["cond"], (),
        send(arg("cond"), "ifTrue:", block([], [], answer(lit(None)))),
        answer(send(SELF, "expensive"))),
      method("expensive", (), (),
        assignInst("called", 0, lit(True)),
        answer(lit(42))),
      method("called", (), (), answer(inst("called", 0))),
      ])


def test_return_from_block_skips_the_rest_of_the_method(interp, guard):
  g = interp.send(guard, "new")
  assert interp.send(g, "guard:", [True]) is None
  assert interp.send(g, "called") is None


def test_guard_falls_through_when_false(interp, guard):
  g = interp.send(guard, "new")
  assert interp.send(g, "guard:", [False]) == 42
  assert interp.send(g, "called") is True


def test_return_unwinds_through_many_activations(interp, newClass):
  # find  #(1 2 3 4) do: [:e | e = 3 ifTrue: [^e * 10]]. ^0
  cls = newClass("Finder", methods=[
      method("find", (), (),
        send(PLiteralArray([lit(1), lit(2), lit(3), lit(4)]), "do:",
          block(["e"], [],
            send(send(arg("e"), "=", lit(3)), "ifTrue:",
              block([], [], answer(send(arg("e"), "*", lit(10))))))),
        answer(lit(0)))])
  assert interp.send(interp.send(cls, "new"), "find") == 30


def test_return_goes_to_home_not_to_the_caller(interp, newClass):
  # run: aBlock  aBlock value. ^#runFinished
  # test         ^(self run: [^#fromBlock]) printString
  cls = newClass("Home", methods=[
      method("run:", ["aBlock"], (),
        send(arg("aBlock"), "value"),
        answer(sym("runFinished"))),
      method("test", (), (),
        answer(send(send(SELF, "run:", block([], [], answer(sym("fromBlock")))),
          "printString"))),
      ])
  assert interp.send(interp.send(cls, "new"), "test") == "fromBlock"


def test_return_to_a_dead_home_is_fatal(interp, newClass):
  # escaper  ^[:x | ^x]
  cls = newClass("Escaper", methods=[
      method("escaper", (), (), answer(block(["x"], [], answer(arg("x")))))])
  closure = interp.send(interp.send(cls, "new"), "escaper")
  with pytest.raises(DeadFrameReturn):
    interp.send(closure, "value:", [5])


def test_return_in_doit_answers_from_the_doit(doit):
  assert doit(answer(lit(1)), lit(2)) == 1


# Globals and unresolved names

def test_global_read_and_write(interp, doit):
  assert doit(assignGlobal("Answer", lit(42))) == 42
  assert interp.globals.get("Answer") == 42
  assert doit(glob("Answer")) == 42


def test_classes_are_globals(interp, doit):
  assert doit(glob("Object")) is interp.registry.at("Object")


def test_unresolved_global_is_fatal(doit):
  with pytest.raises(UnresolvedGlobal):
    doit(glob("Nowhere"))


def test_unresolved_variable_is_fatal(doit):
  with pytest.raises(UnresolvedVariable):
    doit(temp("ghost"))


# Sends

def logAppend(s):
  # log := log , s
  return assignTemp("log", send(temp("log"), ",", lit(s)))


def test_receiver_evaluates_before_arguments(doit):
  # | log | log := ''. (log := log , 'a') , (log := log , 'b')
  assert doit(assignTemp("log", lit("")),
      send(logAppend("a"), ",", logAppend("b")), temps=["log"]) == "aab"


def test_arguments_evaluate_left_to_right(doit):
  # | log | log := ''. [:x :y | log] value: (log := log , '1')
  #   value: (log := log , '2')
  reader = block(["x", "y"], [], temp("log"))
  assert doit(assignTemp("log", lit("")),
      send(reader, "value:value:", logAppend("1"), logAppend("2")),
      temps=["log"]) == "12"


def test_does_not_understand(interp, doit):
  with pytest.raises(DoesNotUnderstand) as info:
    doit(send(lit(3), "frobnicate"))
  assert info.value.className == "SmallInteger"
  assert info.value.selector == "frobnicate"


def test_send_entry_point(interp):
  assert interp.send(3, "+", [4]) == 7


def test_execute_method_checks_arity(interp):
  with pytest.raises(ArityMismatch):
    interp.executeMethod(method("foo:", ["a"]), 3, [])


def test_block_arity_mismatch(doit):
  with pytest.raises(ArityMismatch):
    doit(send(block(["a"], []), "value"))


def test_execute_method_accepts_a_node(interp):
  assert interp.executeMethod(method("seven", (), (), answer(lit(7))), 3) == 7


def test_runaway_recursion_is_reported(interp, newClass):
  cls = newClass("Forever", methods=[
      method("forever", (), (), answer(send(SELF, "forever")))])
  with pytest.raises(InterpreterError):
    interp.send(interp.send(cls, "new"), "forever")


def test_interpreters_are_independent():
  from treetalk.kernel import newInterpreter
  one = newInterpreter()
  two = newInterpreter()
  one.registry.define("OnlyHere", "Object")
  assert one.globals.has("OnlyHere")
  assert not two.globals.has("OnlyHere")
  assert not two.registry.includes("OnlyHere")
  assert isinstance(one.send(one.registry.at("OnlyHere"), "new"), STObject)


def test_list_literal_from_json_is_fresh_each_time(interp):
  # The answer is mutated with at:put:, then the same node runs again.
  node = PSequence([], [fromJson({"node": "literal", "value": [1, 2, 3]})])
  first = interp.evaluateDoit(node)
  interp.send(first, "at:put:", [1, 99])
  assert first == [99, 2, 3]
  assert interp.evaluateDoit(node) == [1, 2, 3]


def test_foreign_host_value_is_an_interpreter_error(interp):
  with pytest.raises(NoClassForValue):
    interp.send({"a": 1}, "size")
  with pytest.raises(InterpreterError):
    interp.evaluateDoit(PSequence([], [send(lit(object()), "size")]))
