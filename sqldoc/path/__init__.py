"""Addressing expressions and canonical path encoding"""

from sqldoc.path.ast_nodes import Address, Index, Member, Wildcard
from sqldoc.path.codec import PathCodec, decode_path, encode_path
from sqldoc.path.parser import PathCompiler, compile_address

__all__ = [
    "Address",
    "Index",
    "Member",
    "Wildcard",
    "PathCodec",
    "decode_path",
    "encode_path",
    "PathCompiler",
    "compile_address",
]
