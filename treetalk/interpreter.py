# Tree-walking evaluator.
#
# evaluate(node, frame) is the whole interpreter: it looks the node's class up
# in a fixed table and hands the node to the matching eval* method. Message
# sends come back through activate(), which builds the new frame and decides
# between a primitive and the method body.
#
# Two chains meet here. frame.lexicalParent is how temps and args are found,
# and how ^ finds its home method. frame.caller is the call stack and is never
# used for lookup.

import logging

from .errors import (ArityMismatch, DeadFrameReturn, DoesNotUnderstand,
    InterpreterError, NonLocalReturn, PrimitiveFailure, UnresolvedGlobal)
from .frames import BlockClosure, Frame
from .nodes import (KIND_ARG, KIND_GLOBAL, KIND_INST_VAR, KIND_TEMP, PAnswer,
    PAssignment, PBlock, PLiteral, PLiteralArray, PMethod, PReference, PSelf,
    PSend, PSequence, PSuper, PSymbol)
from .objects import CompiledMethod, STObject, Symbol
from .primitives import PrimitiveTable, unknownPrimitive

logger = logging.getLogger(__name__)


class Interpreter:
  """Evaluates method and block bodies against a class registry, a global
  environment and a primitive table. All three are per-instance, so several
  interpreters can live side by side."""

  def __init__(self, registry, globals, primitives=None):
    self.registry = registry
    self.globals = globals
    if primitives is None:
      primitives = PrimitiveTable.essentials()
    self.primitives = primitives

    self.dispatch = {
        PLiteral: self.evalLiteral,
        PSymbol: self.evalSymbol,
        PLiteralArray: self.evalLiteralArray,
        PSelf: self.evalSelf,
        PSuper: self.evalSelf,
        PReference: self.evalReference,
        PAssignment: self.evalAssignment,
        PSequence: self.evalSequence,
        PSend: self.evalSend,
        PAnswer: self.evalAnswer,
        PBlock: self.evalBlock,
        }

  # Entry points.

  def executeMethod(self, method, receiver, arguments=()):
    """Run method on receiver and answer its result. A PMethod node is
    accepted too and treated as if it were installed in the receiver's
    class."""
    if isinstance(method, PMethod):
      method = CompiledMethod.fromNode(method, self.registry.classOf(receiver))
    try:
      return self.activate(method, receiver, list(arguments))
    except RecursionError:
      raise InterpreterError(
          "Stack depth exceeded while running {!r}".format(method)) from None

  def send(self, receiver, selector, arguments=()):
    cls = self.registry.classOf(receiver)
    method = self.lookup(selector, cls)
    if method is None:
      raise DoesNotUnderstand(cls.name, selector)
    return self.executeMethod(method, receiver, arguments)

  def evaluateDoit(self, sequence, receiver=None):
    """Evaluate a free-standing sequence the way a workspace does: as the
    body of an anonymous method on receiver, answering the last statement's
    value unless it returns explicitly."""
    method = CompiledMethod("DoIt", (), sequence, None,
        self.registry.classOf(receiver))
    frame = Frame(receiver, method)
    try:
      return self.evaluate(sequence, frame)
    except NonLocalReturn as nlr:
      if nlr.homeFrame is not frame:
        raise
      return nlr.value
    except RecursionError:
      raise InterpreterError("Stack depth exceeded in DoIt") from None
    finally:
      frame.active = False

  def evaluate(self, node, frame):
    try:
      handler = self.dispatch[type(node)]
    except KeyError:
      raise InterpreterError(
          "Cannot evaluate node {:s}".format(type(node).__name__)) from None
    return handler(node, frame)

  # Leaves.

  def evalLiteral(self, node, frame):
    return node.value

  def evalSymbol(self, node, frame):
    return Symbol(node.value)

  def evalLiteralArray(self, node, frame):
    # A fresh list each time, so nobody can mutate the literal itself.
    return [self.evaluate(e, frame) for e in node.elements]

  def evalSelf(self, node, frame):
    # self and super are the same object; super only matters to evalSend.
    return frame.receiver

  def evalReference(self, node, frame):
    if node.kind == KIND_INST_VAR:
      return self.instanceSlots(frame.receiver, node.index)[node.index]
    elif node.kind == KIND_TEMP or node.kind == KIND_ARG:
      return frame.lookup(node.name)
    elif node.kind == KIND_GLOBAL:
      try:
        return self.globals.get(node.name)
      except KeyError:
        raise UnresolvedGlobal(node.name) from None
    raise InterpreterError("Unknown reference type: " + str(node.kind))

  def evalAssignment(self, node, frame):
    # Value first, then the store.
    value = self.evaluate(node.value, frame)
    if node.kind == KIND_INST_VAR:
      self.instanceSlots(frame.receiver, node.index)[node.index] = value
    elif node.kind == KIND_TEMP or node.kind == KIND_ARG:
      frame.assign(node.name, value)
    elif node.kind == KIND_GLOBAL:
      self.globals.set(node.name, value)
    else:
      raise InterpreterError("Unknown assignment type: " + str(node.kind))
    return value

  def instanceSlots(self, receiver, index):
    if not isinstance(receiver, STObject):
      raise InterpreterError(
          "{!r} has no instance variables".format(receiver))
    if index is None or not 0 <= index < len(receiver.slots):
      raise InterpreterError("Bad instance variable index {!r} for {!r}".format(
          index, receiver))
    return receiver.slots

  # Structure.

  def evalSequence(self, node, frame):
    # Temps live in the current frame, starting out as nil. An empty sequence
    # answers nil.
    for name in node.temps:
      frame.declare(name)
    result = None
    for stmt in node.statements:
      result = self.evaluate(stmt, frame)
    return result

  def evalBlock(self, node, frame):
    # Captures frame itself, not a copy of its slots.
    return BlockClosure(node, frame)

  def evalAnswer(self, node, frame):
    value = self.evaluate(node.expr, frame)
    home = frame.home()
    if not home.active:
      raise DeadFrameReturn(value)
    logger.debug("^%r to %r", value, home)
    raise NonLocalReturn(value, home)

  # Sends.

  def evalSend(self, node, frame):
    # Receiver, then arguments left to right, then lookup.
    receiver = self.evaluate(node.receiver, frame)
    args = [self.evaluate(a, frame) for a in node.args]

    if node.isSuperSend:
      # Start above the class that defines the running method, whatever the
      # receiver's class happens to be.
      owner = frame.method.ownerClass
      start = self.registry.superclassOf(owner)
    else:
      start = self.registry.classOf(receiver)

    method = self.lookup(node.selector, start) if start is not None else None
    if method is None:
      cls = self.registry.classOf(receiver)
      raise DoesNotUnderstand(cls.name, node.selector)

    logger.debug("%r #%s -> %r", receiver, node.selector, method)
    return self.activate(method, receiver, args, frame)

  def lookup(self, selector, cls):
    while cls is not None:
      method = self.registry.methodFor(selector, cls)
      if method is not None:
        return method
      cls = self.registry.superclassOf(cls)
    return None

  def activate(self, method, receiver, args, caller=None):
    """Run one method activation. The frame is fresh, with no lexical
    parent. An unwind aimed at this frame ends the activation with its
    value; any other unwind keeps going."""
    if len(args) != method.numArgs:
      raise ArityMismatch(repr(method), method.numArgs, len(args))

    frame = Frame(receiver, method, caller=caller)
    for name, value in zip(method.argNames, args):
      frame.declare(name, value)

    try:
      if method.isPrimitive:
        try:
          return self.runPrimitive(method, frame)
        except PrimitiveFailure as failure:
          logger.debug("primitive %d of %r failed: %s", method.primitive,
              method, failure.reason)
      # No primitive, or it failed: the body runs in the same frame.
      self.evaluate(method.body, frame)
      return receiver
    except NonLocalReturn as nlr:
      if nlr.homeFrame is not frame:
        raise
      return nlr.value
    finally:
      frame.active = False

  def runPrimitive(self, method, frame):
    primitive = self.primitives.at(method.primitive)
    if primitive is None:
      primitive = unknownPrimitive
    return primitive(self, frame)

  def invokeClosure(self, closure, args, caller=None):
    """value, value: and friends. The block's frame hangs off the frame the
    block was created in, and runs with that frame's receiver."""
    code = closure.code
    if len(args) != len(code.params):
      raise ArityMismatch("a block", len(code.params), len(args))

    defining = closure.definingFrame
    frame = Frame(defining.receiver, defining.method, lexicalParent=defining,
        caller=caller, isBlock=True)
    for name, value in zip(code.params, args):
      frame.declare(name, value)
    return self.evaluate(code.body, frame)
