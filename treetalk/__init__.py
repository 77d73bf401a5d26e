from .errors import (ArityMismatch, DeadFrameReturn, DoesNotUnderstand,
    ImageError, InterpreterError, NoClassForValue, NonBooleanReceiver,
    NonLocalReturn, PrimitiveFailure, SmalltalkError, UnresolvedGlobal,
    UnresolvedVariable)
from .frames import BlockClosure, Frame
from .interpreter import Interpreter
from .kernel import bootstrap, newInterpreter
from .objects import (ClassRegistry, CompiledMethod, Globals, STClass,
    STObject, Symbol)
from .primitives import PrimitiveTable
