from .errors import ARGUMENT_COUNT, PrimitiveFailure, UnresolvedVariable


class Frame:
  """One activation of a method or a block.

  Two links leave a frame. lexicalParent is where variable lookup continues
  when a name isn't declared here: it is None for a method and the defining
  frame for a block. caller is whoever sent the message or invoked the block,
  and is only there so tools can walk the stack.

  A frame is never copied. Every closure created while it was current holds
  the same object, which is what makes assignments to outer temps visible
  everywhere.
  """
  def __init__(self, receiver, method, lexicalParent=None, caller=None,
      isBlock=False):
    self.receiver = receiver
    self.method = method
    self.lexicalParent = lexicalParent
    self.caller = caller
    self.isBlock = isBlock
    self.slots = {}
    # Cleared when a method activation finishes, so a late ^ from a block can
    # tell its home is gone.
    self.active = True

  def declare(self, name, value=None):
    self.slots[name] = value

  def owner(self, name):
    """The frame along the lexical chain that declares name, or None."""
    frame = self
    while frame is not None:
      if name in frame.slots:
        return frame
      frame = frame.lexicalParent
    return None

  def lookup(self, name):
    frame = self.owner(name)
    if frame is None:
      raise UnresolvedVariable(name)
    return frame.slots[name]

  def assign(self, name, value):
    frame = self.owner(name)
    if frame is None:
      raise UnresolvedVariable(name)
    frame.slots[name] = value
    return value

  def home(self):
    # The method frame at the root of the lexical chain.
    frame = self
    while frame.lexicalParent is not None:
      frame = frame.lexicalParent
    return frame

  # Primitive support.

  def argumentCount(self):
    return len(self.method.argNames)

  def argumentAt(self, index):
    """1-based, by the method's declared parameter names."""
    names = self.method.argNames
    if not 1 <= index <= len(names):
      raise PrimitiveFailure(ARGUMENT_COUNT)
    return self.slots[names[index - 1]]

  def callers(self):
    frame = self.caller
    while frame is not None:
      yield frame
      frame = frame.caller

  def __repr__(self):
    kind = "block" if self.isBlock else "method"
    selector = self.method.selector if self.method is not None else "?"
    return "<Frame {:s} {:s} {!r}>".format(kind, selector, self.slots)


class BlockClosure:
  """A block literal paired with the frame that was current when it was
  evaluated. definingFrame is shared with that frame's other closures."""
  def __init__(self, code, definingFrame):
    self.code = code
    self.definingFrame = definingFrame

  @property
  def numArgs(self):
    return len(self.code.params)

  def __repr__(self):
    return "a BlockClosure({:d} args)".format(self.numArgs)
