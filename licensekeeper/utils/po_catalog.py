"""
Reading and compiling gettext .po message catalogs.

licensekeeper.i18n loads a catalog straight from its .po file when no compiled
.mo sits next to it; compile_translations.py writes the .mo files for
deployments that prefer them.
"""

import os
import struct

_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


def _unquote(text):
    """Strip the surrounding quotes of a .po string and resolve escapes."""
    text = text[1:-1]
    result = []
    i = 0
    while i < len(text):
        if text[i] == "\\" and i + 1 < len(text):
            result.append(_ESCAPES.get(text[i + 1], text[i + 1]))
            i += 2
        else:
            result.append(text[i])
            i += 1
    return "".join(result)


def parse_po(po_file):
    """
    Read a .po catalog into a msgid -> msgstr dict.

    The header entry (empty msgid) is kept so gettext picks up the charset.
    Untranslated entries are skipped.
    """
    entries = {}
    msgid = msgstr = None
    current = None

    def flush():
        if msgid is not None and msgstr:
            entries[msgid] = msgstr

    with open(po_file, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if line.startswith("msgid "):
                flush()
                msgid, msgstr, current = _unquote(line[6:]), None, "id"
            elif line.startswith("msgstr "):
                msgstr, current = _unquote(line[7:]), "str"
            elif line.startswith('"') and current == "id":
                msgid += _unquote(line)
            elif line.startswith('"') and current == "str":
                msgstr += _unquote(line)
            elif not line or line.startswith("#"):
                flush()
                msgid = msgstr = current = None
    flush()
    return entries


def write_mo(entries, mo_file):
    """Write entries in the GNU .mo format, sorted for binary search."""
    pairs = sorted((k.encode("utf-8"), v.encode("utf-8")) for k, v in entries.items())
    count = len(pairs)
    header_size = 7 * 4
    key_start = header_size + 16 * count
    value_start = key_start + sum(len(k) + 1 for k, _v in pairs)

    key_table, value_table = [], []
    offset = key_start
    for key, _value in pairs:
        key_table.append(struct.pack("II", len(key), offset))
        offset += len(key) + 1
    offset = value_start
    for _key, value in pairs:
        value_table.append(struct.pack("II", len(value), offset))
        offset += len(value) + 1

    with open(mo_file, "wb") as f:
        f.write(
            struct.pack(
                "7I", 0x950412DE, 0, count, header_size, header_size + 8 * count, 0, 0
            )
        )
        f.writelines(key_table)
        f.writelines(value_table)
        for key, _value in pairs:
            f.write(key + b"\0")
        for _key, value in pairs:
            f.write(value + b"\0")


def compile_catalogs(locales_dir, domain):
    """Compile every <lang>/LC_MESSAGES/<domain>.po; returns the languages built."""
    compiled = []
    for lang in sorted(os.listdir(locales_dir)):
        po_file = os.path.join(locales_dir, lang, "LC_MESSAGES", f"{domain}.po")
        if not os.path.exists(po_file):
            continue
        write_mo(parse_po(po_file), po_file[:-3] + ".mo")
        compiled.append(lang)
    return compiled
