# Everything the interpreter can raise.
#
# InterpreterError and its subclasses are fatal to the current evaluation and
# propagate out of executeMethod() to whoever called it.
# PrimitiveFailure never leaves the method activation that owns the primitive.
# NonLocalReturn is control flow, not an error, so it is kept out of the
# InterpreterError tree where an error handler could swallow it.


class InterpreterError(Exception):
  pass


class UnresolvedVariable(InterpreterError):
  def __init__(self, name):
    super().__init__("Unresolved variable '{:s}'".format(name))
    self.name = name


class UnresolvedGlobal(InterpreterError):
  def __init__(self, name):
    super().__init__("Unresolved global '{:s}'".format(name))
    self.name = name


class DoesNotUnderstand(InterpreterError):
  def __init__(self, className, selector):
    super().__init__("{:s} does not understand #{:s}".format(className,
      selector))
    self.className = className
    self.selector = selector


class ArityMismatch(InterpreterError):
  def __init__(self, what, expected, given):
    super().__init__("{:s} expects {:d} argument(s), got {:d}".format(what,
      expected, given))
    self.expected = expected
    self.given = given


class DeadFrameReturn(InterpreterError):
  """A ^ inside a block whose home method has already returned."""
  def __init__(self, value):
    super().__init__("Cannot return {!r}: home context is dead".format(value))
    self.value = value


class ImageError(InterpreterError):
  pass


class SmalltalkError(InterpreterError):
  """Raised by Object>>error:, i.e. by code running in the image."""
  def __init__(self, message):
    super().__init__(message)
    self.messageText = message


class NoClassForValue(InterpreterError):
  """A host value that stands for no kernel object."""
  def __init__(self, value):
    super().__init__("No class for host value {!r}".format(value))
    self.value = value


class NonBooleanReceiver(InterpreterError):
  def __init__(self, value):
    super().__init__("Loop condition answered non-boolean {!r}".format(value))
    self.value = value


# Causes for a PrimitiveFailure. They only ever show up as the reason of a
# failure, never as exceptions of their own.
TYPE_MISMATCH = 'TypeMismatch'
INDEX_OUT_OF_BOUNDS = 'IndexOutOfBounds'
DIVISION_BY_ZERO = 'DivisionByZero'
OVERFLOW = 'Overflow'
INEXACT_RESULT = 'InexactResult'
ARGUMENT_COUNT = 'ArgumentCount'
NOT_IMPLEMENTED = 'NotImplemented'


class PrimitiveFailure(Exception):
  def __init__(self, reason=TYPE_MISMATCH):
    super().__init__(reason)
    self.reason = reason


class NonLocalReturn(Exception):
  """Unwinds activations until the one whose frame is homeFrame."""
  def __init__(self, value, homeFrame):
    super().__init__()
    self.value = value
    self.homeFrame = homeFrame
