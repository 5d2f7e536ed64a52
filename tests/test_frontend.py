"""
Front-end tests: loader, line tokenizer, label table and decoder.

Covers the text -> Instruction half of the pipeline. Nothing here
executes a program.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from asm_simulator import instructions as ins
from asm_simulator.decoder import OPERAND_FORMATS, decode, decode_line
from asm_simulator.errors import (
    ArityMismatch, DuplicateLabel, InvalidOperandKind, LoadError, MalformedLine,
    MissingEntryLabel, RegisterOutOfRange, UnknownOpcode,
)
from asm_simulator.labels import build_label_table
from asm_simulator.lexer import TokenType, tokenize_line
from asm_simulator.loader import load_program, split_lines


def _types(line: str) -> list:
    return [t.type for t in tokenize_line(line)]


# ─── Loader ─────────────────────

class TestLoader:
    def test_split_keeps_blank_lines(self):
        assert split_lines("@MAIN\n\nEXIT\n") == ("@MAIN", "", "EXIT")

    def test_split_crlf(self):
        assert split_lines("@MAIN\r\nEXIT\r\n") == ("@MAIN", "EXIT")

    def test_split_empty(self):
        assert split_lines("") == ()

    def test_load_program(self, tmp_path):
        p = tmp_path / "prog.asm"
        p.write_text("@MAIN\nLI $1 5\nEXIT\n", encoding="utf-8")
        assert load_program(p) == ("@MAIN", "LI $1 5", "EXIT")

    def test_missing_file_is_load_error(self, tmp_path):
        with pytest.raises(LoadError, match="not found"):
            load_program(tmp_path / "nope.asm")

    def test_directory_is_load_error(self, tmp_path):
        with pytest.raises(LoadError):
            load_program(tmp_path)


# ─── Tokenizer ─────────────────────

class TestTokenizer:
    def test_blank_and_comment_lines(self):
        assert tokenize_line("") == []
        assert tokenize_line("   \t ") == []
        assert tokenize_line("// a comment") == []
        assert tokenize_line("   // indented comment") == []

    def test_arithmetic_line(self):
        tokens = tokenize_line("  ADD $3 $1 $2")
        assert [t.type for t in tokens] == [
            TokenType.OPCODE, TokenType.REGISTER, TokenType.REGISTER, TokenType.REGISTER]
        assert [t.value for t in tokens] == ["ADD", 3, 1, 2]
        assert tokens[0].col == 3

    def test_signed_immediates(self):
        assert tokenize_line("LI $1 -6")[2].value == -6
        assert tokenize_line("LI $1 +6")[2].value == 6
        assert tokenize_line("LI $1 2147483647")[2].value == 2147483647
        assert tokenize_line("LI $1 -2147483648")[2].value == -2147483648

    def test_immediate_out_of_32_bit_range(self):
        with pytest.raises(MalformedLine, match="32-bit"):
            tokenize_line("LI $1 2147483648", 4)

    def test_label_reference_and_definition(self):
        assert _types("@LOOP") == [TokenType.LABEL]
        tokens = tokenize_line("BGE $4 $31 @ENDLOOP")
        assert tokens[3].type is TokenType.LABEL
        assert tokens[3].value == "ENDLOOP"

    def test_lowercase_label_is_malformed(self):
        with pytest.raises(MalformedLine, match="Bad label"):
            tokenize_line("JUMP @loop")

    def test_label_with_digits_is_malformed(self):
        with pytest.raises(MalformedLine):
            tokenize_line("@LOOP2")

    def test_trailing_comment_rejected(self):
        with pytest.raises(MalformedLine, match="inline comments"):
            tokenize_line("ADD $1 $2 $3 // sum")

    def test_trailing_garbage_rejected(self):
        with pytest.raises(MalformedLine, match="Unrecognized operand"):
            tokenize_line("EXIT now")

    def test_bad_leading_lexeme(self):
        with pytest.raises(MalformedLine, match="Expected an opcode"):
            tokenize_line("$1 LI 5")

    def test_error_carries_line_number(self):
        with pytest.raises(MalformedLine) as exc_info:
            tokenize_line("LI $1 five", 12)
        assert exc_info.value.line_num == 12
        assert str(exc_info.value).startswith("Line 12:")


# ─── Label table ─────────────────────

class TestLabelTable:
    def test_labels_map_to_line_indices(self):
        lines = ["// header", "@MAIN", "JUMP @END", "", "@END", "EXIT"]
        table = build_label_table(lines)
        assert dict(table) == {"MAIN": 1, "END": 4}

    def test_main_can_be_mid_file(self):
        lines = ["@HELPER", "EXIT", "@MAIN", "JUMP @HELPER"]
        assert build_label_table(lines)["MAIN"] == 2

    def test_missing_main(self):
        with pytest.raises(MissingEntryLabel):
            build_label_table(["@START", "EXIT"])

    def test_empty_program_has_no_main(self):
        with pytest.raises(MissingEntryLabel):
            build_label_table([])

    def test_duplicate_label(self):
        with pytest.raises(DuplicateLabel, match="already defined at line 3") as exc_info:
            build_label_table(["", "@MAIN", "@LOOP", "@LOOP"])
        assert exc_info.value.line_num == 4

    def test_label_line_must_stand_alone(self):
        with pytest.raises(MalformedLine):
            build_label_table(["@MAIN EXIT"])
        with pytest.raises(MalformedLine, match="stand alone"):
            build_label_table(["@MAIN @AGAIN"])

    def test_instruction_lines_not_decoded_by_scan(self):
        # Bad instructions are only reported when executed
        table = build_label_table(["@MAIN", "FROB $1", "LI $99 1", "EXIT"])
        assert table["MAIN"] == 0

    def test_table_is_read_only(self):
        table = build_label_table(["@MAIN"])
        with pytest.raises(TypeError):
            table["OTHER"] = 3


# ─── Decoder ─────────────────────

class TestDecoder:
    def test_every_opcode_has_a_format(self):
        assert set(OPERAND_FORMATS) == {
            "LI", "MOVE", "ADD", "SUB", "MUL", "DIV", "REM", "PRINT", "JUMP",
            "BEQ", "BNE", "BLT", "BLE", "BGT", "BGE", "EXIT", "SKIP", "PUSH", "POP",
        }

    def test_decode_each_shape(self):
        assert decode_line("LI $30 -6") == ins.LoadImmediate(30, -6)
        assert decode_line("MOVE $1 $2") == ins.Move(1, 2)
        assert decode_line("ADD $31 $16 $24") == ins.Add(31, 16, 24)
        assert decode_line("REM $1 $2 $3") == ins.Rem(1, 2, 3)
        assert decode_line("  PRINT $4") == ins.Print(4)
        assert decode_line("JUMP @ENDLOOP") == ins.Jump("ENDLOOP")
        assert decode_line("  BGE $4 $31 @ENDLOOP") == ins.Bge(4, 31, "ENDLOOP")
        assert decode_line("EXIT") == ins.Exit()
        assert decode_line("SKIP") == ins.Skip()
        assert decode_line("PUSH $7") == ins.Push(7)
        assert decode_line("POP $8") == ins.Pop(8)

    def test_same_operands_different_opcode_not_equal(self):
        assert decode_line("ADD $1 $2 $3") != decode_line("SUB $1 $2 $3")

    def test_blank_comment_and_label_lines_are_skip(self):
        assert decode([]) == ins.Skip()
        assert decode_line("// nothing") == ins.Skip()
        assert decode_line("@LOOP") == ins.Skip()

    def test_str_renders_source_form(self):
        assert str(decode_line("  BNE   $1  $2   @LOOP")) == "BNE $1 $2 @LOOP"
        assert str(decode_line("LI $1 -3")) == "LI $1 -3"
        assert str(decode_line("EXIT")) == "EXIT"

    def test_unknown_opcode(self):
        with pytest.raises(UnknownOpcode, match="FROB"):
            decode_line("FROB $1", 3)

    def test_opcodes_are_case_sensitive(self):
        with pytest.raises(UnknownOpcode):
            decode_line("add $1 $2 $3")

    def test_arity_mismatch(self):
        with pytest.raises(ArityMismatch, match="expects 3 operand"):
            decode_line("ADD $1 $2")
        with pytest.raises(ArityMismatch, match="got 1"):
            decode_line("EXIT $1")

    def test_branch_given_immediate(self):
        with pytest.raises(InvalidOperandKind, match="must be a label"):
            decode_line("BEQ $1 $2 5")

    def test_li_given_register_source(self):
        with pytest.raises(InvalidOperandKind, match="operand 2 must be an immediate"):
            decode_line("LI $1 $2")

    def test_jump_given_register(self):
        with pytest.raises(InvalidOperandKind):
            decode_line("JUMP $1")

    def test_register_out_of_range(self):
        assert decode_line("LI $31 1") == ins.LoadImmediate(31, 1)
        with pytest.raises(RegisterOutOfRange, match=r"\$32"):
            decode_line("LI $32 1")
        with pytest.raises(RegisterOutOfRange):
            decode_line("BGE $1300 $23 @SOMETHING")

    def test_decode_error_positions(self):
        with pytest.raises(UnknownOpcode) as exc_info:
            decode_line("NOPE", 9)
        assert exc_info.value.line_num == 9
        assert exc_info.value.line_text == "NOPE"
        assert exc_info.value.kind == "UnknownOpcode"
