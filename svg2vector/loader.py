"""SVG document loading and Inkscape layer handling."""

from __future__ import annotations

import gzip
import logging
import re
import xml.etree.ElementTree as ET
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Protocol

_LOGGER = logging.getLogger("svg2vector.loader")

SVG_NS = "http://www.w3.org/2000/svg"
INKSCAPE_NS = "http://www.inkscape.org/namespaces/inkscape"

NAMESPACES = {
    "": SVG_NS,
    "inkscape": INKSCAPE_NS,
    "sodipodi": "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd",
    "xlink": "http://www.w3.org/1999/xlink",
    "dc": "http://purl.org/dc/elements/1.1/",
    "cc": "http://creativecommons.org/ns#",
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
}

_GROUP_TAG = f"{{{SVG_NS}}}g"
_GROUPMODE = f"{{{INKSCAPE_NS}}}groupmode"
_LABEL = f"{{{INKSCAPE_NS}}}label"
_DISPLAY_RE = re.compile(r"display\s*:\s*[^;]*;?")
_GZIP_MAGIC = b"\x1f\x8b"

for _prefix, _uri in NAMESPACES.items():
    ET.register_namespace(_prefix, _uri)


class DocumentLoader(Protocol):
    """Loader interface the orchestrator consumes."""

    def load(self, path: str) -> Optional[str]:
        """Load *path*, returning an error message or ``None`` on success."""

    def has_layers(self) -> bool:
        ...

    def get_layers(self) -> Dict[str, int]:
        """Layer identifiers mapped to their index, ordered by index."""

    def switch_on_layer(self, layer_id: str) -> None:
        ...

    def switch_off_all_layers(self) -> None:
        ...

    def switch_on_all_layers(self) -> None:
        ...

    def serialize(self) -> List[str]:
        """Current document state as text lines."""


def _set_display(element: ET.Element, value: str) -> None:
    style = _DISPLAY_RE.sub("", element.get("style", "")).strip().rstrip(";")
    declarations = [part for part in (style, f"display:{value}") if part]
    element.set("style", ";".join(declarations))


class SvgDocumentLoader:
    """Loads SVG or SVGZ files and exposes their Inkscape layers.

    Layers are ``<g inkscape:groupmode="layer">`` elements in document order,
    indexed from 1 to match Inkscape's ``layer<N>`` node identifiers. A layer
    is identified by its ``inkscape:label``, falling back to its ``id``.
    """

    def __init__(self) -> None:
        self.path: Optional[Path] = None
        self._tree: Optional[ET.ElementTree] = None
        self._layers: Dict[str, ET.Element] = {}
        self._indices: Dict[str, int] = {}

    def load(self, path: str) -> Optional[str]:
        source = Path(path)
        try:
            raw = source.read_bytes()
            if raw[:2] == _GZIP_MAGIC:
                raw = gzip.decompress(raw)
            root = ET.fromstring(raw)
        except OSError as exc:
            return f"cannot read input file <{path}>: {exc}"
        except (EOFError, zlib.error) as exc:
            return f"input file <{path}> is not a valid SVGZ document: {exc}"
        except ET.ParseError as exc:
            return f"input file <{path}> is not a valid SVG document: {exc}"

        self.path = source
        self._tree = ET.ElementTree(root)
        self._layers.clear()
        self._indices.clear()

        index = 0
        for element in root.iter(_GROUP_TAG):
            if element.get(_GROUPMODE) != "layer":
                continue
            index += 1
            layer_id = element.get(_LABEL) or element.get("id") or f"layer{index}"
            if layer_id in self._layers:
                layer_id = element.get("id") or f"layer{index}"
            self._layers[layer_id] = element
            self._indices[layer_id] = index

        _LOGGER.debug("Loaded <%s> with %d layer(s)", path, len(self._layers))
        return None

    def has_layers(self) -> bool:
        return bool(self._layers)

    def get_layers(self) -> Dict[str, int]:
        return dict(sorted(self._indices.items(), key=lambda item: item[1]))

    def switch_on_layer(self, layer_id: str) -> None:
        element = self._layers.get(layer_id)
        if element is None:
            raise KeyError(f"Unknown layer: {layer_id}")
        _set_display(element, "inline")

    def switch_off_all_layers(self) -> None:
        for element in self._layers.values():
            _set_display(element, "none")

    def switch_on_all_layers(self) -> None:
        for element in self._layers.values():
            _set_display(element, "inline")

    def serialize(self) -> List[str]:
        if self._tree is None:
            raise RuntimeError("No document loaded")
        text = ET.tostring(self._tree.getroot(), encoding="unicode")
        return text.splitlines(keepends=True)


__all__ = ["DocumentLoader", "SvgDocumentLoader", "NAMESPACES"]
