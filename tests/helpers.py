"""
Builders for tiny but well-formed PE / ELF images and hand-made candidates.
"""
from __future__ import annotations

import struct

from strix.core.models import Candidate, Category, EntropyLabel, Source

PE_HEADER_OFFSET = 0x80
PE_OPTIONAL_SIZE = 0xE0


def build_pe(sections=((".text", 0x1000, 0x400, 0x200),), file_size=0x600,
             optional_size=PE_OPTIONAL_SIZE, declared_count=None):
    """
    Build a PE image. *sections* is a list of
    ``(name, virtual_address, raw_size, raw_offset)``.
    """
    count = len(sections) if declared_count is None else declared_count
    image = bytearray(b"MZ" + b"\x00" * (PE_HEADER_OFFSET - 2))
    struct.pack_into("<I", image, 0x3C, PE_HEADER_OFFSET)

    image += b"PE\x00\x00"
    image += struct.pack("<HHIIIHH", 0x14C, count, 0, 0, 0, optional_size, 0x0102)
    image += b"\x00" * optional_size
    for name, virtual_address, raw_size, raw_offset in sections:
        image += struct.pack(
            "<8sIIIIIIHHI", name.encode(), raw_size, virtual_address, raw_size,
            raw_offset, 0, 0, 0, 0, 0x60000020,
        )

    if len(image) < file_size:
        image += b"\x00" * (file_size - len(image))
    return bytes(image)


def pe_table_offset(optional_size=PE_OPTIONAL_SIZE):
    return PE_HEADER_OFFSET + 4 + 20 + optional_size


def build_elf(sections, bits=64, endian="<"):
    """
    Build an ELF image. *sections* is a list of ``(name, size, address)``;
    each section gets *size* zero bytes of content.
    """
    header_size = 64 if bits == 64 else 52
    entry_size = 64 if bits == 64 else 40

    strtab = b"\x00"
    name_offsets = {}
    for name in [s[0] for s in sections] + [".shstrtab"]:
        name_offsets[name] = len(strtab)
        strtab += name.encode() + b"\x00"

    body = bytearray()
    cursor = header_size
    entries = [(0, 0, 0, 0, 0)]
    for name, size, address in sections:
        entries.append((name_offsets.get(name, 0), 1, address, cursor, size))
        body += b"\x00" * size
        cursor += size

    strtab_offset = cursor
    body += strtab
    cursor += len(strtab)
    entries.append((name_offsets[".shstrtab"], 3, 0, strtab_offset, len(strtab)))
    shoff = cursor

    shnum = len(entries)
    ident = b"\x7fELF" + bytes([2 if bits == 64 else 1, 1 if endian == "<" else 2, 1]) + b"\x00" * 9
    if bits == 64:
        header = ident + struct.pack(endian + "HHIQQQIHHHHHH", 2, 0x3E, 1, 0, 0, shoff, 0,
                                     header_size, 0, 0, entry_size, shnum, shnum - 1)
    else:
        header = ident + struct.pack(endian + "HHIIIIIHHHHHH", 2, 0x03, 1, 0, 0, shoff, 0,
                                     header_size, 0, 0, entry_size, shnum, shnum - 1)

    table = bytearray()
    for name_index, kind, address, offset, size in entries:
        if bits == 64:
            table += struct.pack(endian + "IIQQQQIIQQ", name_index, kind, 0, address, offset,
                                 size, 0, 0, 1, 0)
        else:
            table += struct.pack(endian + "10I", name_index, kind, 0, address, offset, size,
                                 0, 0, 1, 0)

    return bytes(header + body + table)


def make_candidate(value="sample", source=Source.RAW, categories=(Category.GENERAL,),
                   entropy=1.0, api_group=None, xor_key=None, offset=0):
    if source is Source.XOR and xor_key is None:
        xor_key = 0x10
    return Candidate(
        value=value,
        offset=offset,
        encoding="ascii",
        categories=frozenset(categories),
        entropy=entropy,
        entropy_label=EntropyLabel.LOW,
        source=source,
        api_group=api_group,
        xor_key=xor_key,
        raw_length=len(value),
    )
