"""
Parses PE and ELF section tables into named byte ranges.

Input files are assumed hostile: every field is bounds-checked before it's
trusted, and nothing in here raises on malformed data. The worst case is an
empty table with an outcome saying why.
"""
import logging
import struct

from strix.core.models import BinaryFormat, ParseOutcome, Section

logger = logging.getLogger(__name__)

PE_MAGIC = b'MZ'
PE_SIGNATURE = b'PE\x00\x00'
ELF_MAGIC = b'\x7fELF'

PE_HEADER_POINTER = 0x3C
PE_FILE_HEADER_SIZE = 20
PE_SECTION_ENTRY_SIZE = 40

ELF_CLASS_32 = 1
ELF_CLASS_64 = 2
ELF_DATA_LSB = 1
ELF_DATA_MSB = 2

# e_shoff, e_shentsize, e_shnum, e_shstrndx positions and the minimum
# section header size we need to read sh_name/sh_addr/sh_offset/sh_size
_ELF_LAYOUT = {
    ELF_CLASS_32: {
        'header_size': 0x34,
        'shoff': (0x20, 'I'),
        'shentsize': 0x2E,
        'shnum': 0x30,
        'shstrndx': 0x32,
        'entry_min': 0x28,
        'addr': (0x0C, 'I'),
        'offset': (0x10, 'I'),
        'size': (0x14, 'I'),
    },
    ELF_CLASS_64: {
        'header_size': 0x40,
        'shoff': (0x28, 'Q'),
        'shentsize': 0x3A,
        'shnum': 0x3C,
        'shstrndx': 0x3E,
        'entry_min': 0x40,
        'addr': (0x10, 'Q'),
        'offset': (0x18, 'Q'),
        'size': (0x20, 'Q'),
    },
}


class SectionMap:
    """Ordered section list plus how the header parse went."""

    def __init__(self, sections=(), outcome=ParseOutcome.OK, binary_format=BinaryFormat.UNKNOWN):
        self.sections = tuple(sections)
        self.outcome = outcome
        self.format = binary_format

    def lookup(self, offset):
        """Name of the first section containing *offset*, or None."""
        return section_for_offset(self.sections, offset)

    def __iter__(self):
        return iter(self.sections)

    def __len__(self):
        return len(self.sections)

    def __bool__(self):
        return bool(self.sections)

    def __repr__(self):
        return (f"SectionMap(format={self.format.value}, outcome={self.outcome.value}, "
                f"sections={len(self.sections)})")


def detect_format(data):
    """Detect binary format from magic bytes."""
    if bytes(data[:2]) == PE_MAGIC:
        return BinaryFormat.PE
    if bytes(data[:4]) == ELF_MAGIC:
        return BinaryFormat.ELF
    return BinaryFormat.UNKNOWN


def parse_sections(data):
    """Build a SectionMap for *data*, whatever it is."""
    binary_format = detect_format(data)
    if binary_format is BinaryFormat.PE:
        sections, outcome = _parse_pe(data)
    elif binary_format is BinaryFormat.ELF:
        sections, outcome = _parse_elf(data)
    else:
        sections, outcome = [], ParseOutcome.UNSUPPORTED_FORMAT

    if outcome not in (ParseOutcome.OK, ParseOutcome.UNSUPPORTED_FORMAT):
        logger.warning("%s header is %s, kept %d section(s)",
                       binary_format.value, outcome.value, len(sections))
    else:
        logger.debug("%s header: %d section(s)", binary_format.value, len(sections))
    return SectionMap(sections, outcome, binary_format)


def section_for_offset(sections, offset):
    """First section name whose [offset, offset+size) holds *offset*."""
    for section in sections:
        if section.contains(offset):
            return section.name
    return None


def _decode_name(raw):
    return bytes(raw).decode('utf-8', errors='replace')


def _parse_pe(data):
    """Walk the PE section table. A short table keeps whatever entries fit."""
    total = len(data)
    if bytes(data[:2]) != PE_MAGIC:
        return [], ParseOutcome.UNSUPPORTED_FORMAT
    if total < PE_HEADER_POINTER + 4:
        return [], ParseOutcome.TRUNCATED

    (pe_offset,) = struct.unpack_from('<I', data, PE_HEADER_POINTER)
    if pe_offset + 4 > total:
        return [], ParseOutcome.TRUNCATED
    if bytes(data[pe_offset:pe_offset + 4]) != PE_SIGNATURE:
        # Plain DOS executable, or garbage after an MZ
        return [], ParseOutcome.UNSUPPORTED_FORMAT

    file_header = pe_offset + 4
    if file_header + PE_FILE_HEADER_SIZE > total:
        return [], ParseOutcome.TRUNCATED

    (section_count,) = struct.unpack_from('<H', data, file_header + 2)
    (optional_size,) = struct.unpack_from('<H', data, file_header + 16)
    table_start = file_header + PE_FILE_HEADER_SIZE + optional_size

    sections = []
    for index in range(section_count):
        entry = table_start + index * PE_SECTION_ENTRY_SIZE
        if entry + PE_SECTION_ENTRY_SIZE > total:
            return sections, ParseOutcome.TRUNCATED

        name = _decode_name(bytes(data[entry:entry + 8]).rstrip(b'\x00'))
        virtual_address, raw_size, raw_offset = struct.unpack_from('<III', data, entry + 12)
        sections.append(Section(
            name=name,
            offset=raw_offset,
            size=raw_size,
            virtual_address=virtual_address,
        ))

    return sections, ParseOutcome.OK


def _parse_elf(data):
    """Walk the ELF section header table; anything out of range gives up."""
    total = len(data)
    if bytes(data[:4]) != ELF_MAGIC:
        return [], ParseOutcome.UNSUPPORTED_FORMAT
    if total < 6:
        return [], ParseOutcome.TRUNCATED

    elf_class, elf_data = data[4], data[5]
    layout = _ELF_LAYOUT.get(elf_class)
    if layout is None or elf_data not in (ELF_DATA_LSB, ELF_DATA_MSB):
        return [], ParseOutcome.MALFORMED
    if total < layout['header_size']:
        return [], ParseOutcome.TRUNCATED

    order = '<' if elf_data == ELF_DATA_LSB else '>'

    def read(fmt, pos):
        return struct.unpack_from(order + fmt, data, pos)[0]

    shoff = read(layout['shoff'][1], layout['shoff'][0])
    shentsize = read('H', layout['shentsize'])
    shnum = read('H', layout['shnum'])
    shstrndx = read('H', layout['shstrndx'])

    if shoff == 0 or shnum == 0:
        # Stripped of section headers entirely; nothing to attribute to
        return [], ParseOutcome.OK
    if shentsize < layout['entry_min']:
        return [], ParseOutcome.MALFORMED
    if shoff + shnum * shentsize > total:
        return [], ParseOutcome.TRUNCATED
    if shstrndx >= shnum:
        return [], ParseOutcome.MALFORMED

    def entry_field(entry, key):
        pos, fmt = layout[key]
        return read(fmt, entry + pos)

    strtab_entry = shoff + shstrndx * shentsize
    strtab_offset = entry_field(strtab_entry, 'offset')
    strtab_size = entry_field(strtab_entry, 'size')
    if strtab_offset + strtab_size > total:
        return [], ParseOutcome.TRUNCATED
    strtab = bytes(data[strtab_offset:strtab_offset + strtab_size])

    sections = []
    for index in range(shnum):
        entry = shoff + index * shentsize
        name_index = read('I', entry)
        size = entry_field(entry, 'size')

        name = ''
        if name_index < len(strtab):
            end = strtab.find(b'\x00', name_index)
            if end >= 0:
                name = _decode_name(strtab[name_index:end])

        if size == 0 or not name:
            continue

        sections.append(Section(
            name=name,
            offset=entry_field(entry, 'offset'),
            size=size,
            virtual_address=entry_field(entry, 'addr'),
        ))

    return sections, ParseOutcome.OK
