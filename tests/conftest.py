import pytest

from shellasm.isa import instruction_set_manager


MNEMONICS = {"mov": 1, "add": 2, "jmp": 7, "call": 10, "ret": 11}
REGISTERS = {"r0": 0, "r1": 1, "r2": 2, "42": 9}


@pytest.fixture(autouse=True)
def _reset_instruction_set():
    instruction_set_manager.load_default()
    yield
    instruction_set_manager.load_default()


@pytest.fixture
def mnemonics():
    return dict(MNEMONICS)


@pytest.fixture
def registers():
    return dict(REGISTERS)
