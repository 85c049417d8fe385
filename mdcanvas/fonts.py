# -*- coding: utf-8 -*-

"""
Font discovery and loading.

`Fonts` keeps a ``{family: {style: path}}`` map filled from fontconfig
(``fc-list`` / ``fc-scan``) and from explicitly registered files such as the
emoji fallback face. `FontBook` turns a `FontSpec` into a Pillow font object.
"""

import logging
import os
import shutil
import subprocess
import threading
from dataclasses import dataclass, replace
from typing import Dict, List, NamedTuple, Optional

from PIL import ImageFont

logger = logging.getLogger(__name__)

GENERIC_SANS = 'sans-serif'
GENERIC_MONO = 'monospace'

# Bitmap colour emoji fonts only load at one of their embedded strike sizes
EMOJI_STRIKE_SIZES = (109, 160, 136, 128, 96, 72, 64, 48, 32, 20)


@dataclass(frozen=True)
class FontSpec:
    family: str
    size: int
    weight: str = 'normal'
    slant: str = 'normal'

    @property
    def bold(self) -> bool:
        return self.weight == 'bold'

    @property
    def italic(self) -> bool:
        return self.slant == 'italic'

    def with_family(self, family: str) -> 'FontSpec':
        return replace(self, family=family)

    @property
    def css(self) -> str:
        """The canvas-style font string, e.g. ``bold 16px sans-serif``."""
        parts = []
        if self.italic:
            parts.append('italic')
        if self.bold:
            parts.append('bold')
        family = self.family if self.family in (GENERIC_SANS, GENERIC_MONO) else '"{}"'.format(self.family)
        parts.append('{}px {}'.format(self.size, family))
        return ' '.join(parts)

    def __str__(self):
        return self.css


class LoadedFont(NamedTuple):
    font: object
    scale: float = 1.0


def _run_fontconfig(cmd: List[str]) -> str:
    if shutil.which(cmd[0]) is None:
        logger.debug('%s is not installed, skipping font scan', cmd[0])
        return ''
    try:
        proc = subprocess.run(cmd, check=True, capture_output=True, text=True)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning('Font scan with %s failed: %s', cmd[0], e)
        return ''
    return proc.stdout


def parse_fontconfig_output(output: str) -> Dict[str, Dict[str, str]]:
    """Parse ``file|family|style`` lines into a family/style/path map."""
    fonts: Dict[str, Dict[str, str]] = {}
    for line in output.splitlines():
        parts = line.split('|')
        if len(parts) != 3:
            continue
        path, families, styles = (part.strip() for part in parts)
        if not path or not families:
            continue
        # fontconfig lists localized names comma separated, first one is canonical
        family = families.split(',')[0].strip()
        style = styles.split(',')[0].strip() or 'Regular'
        fonts.setdefault(family, {}).setdefault(style, path)
    return fonts


class Fonts(object):

    def __init__(self):
        self.fonts: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()

    def scan_global_fonts(self):
        output = _run_fontconfig(['fc-list', '-f', '%{file}|%{family}|%{style}\n'])
        self._merge(parse_fontconfig_output(output))

    def scan_fonts_folder(self, folder):
        if not os.path.isdir(folder):
            logger.warning('Font folder %s does not exist', folder)
            return
        output = _run_fontconfig(['fc-scan', '--format', '%{file}|%{family}|%{style}\n', folder])
        self._merge(parse_fontconfig_output(output))

    def _merge(self, fonts):
        with self._lock:
            for family, styles in fonts.items():
                known = self.fonts.setdefault(family, {})
                for style, path in styles.items():
                    known.setdefault(style, path)
        logger.debug('Font registry now holds %d families', len(self.fonts))

    def register_font(self, path: str, family: str, style: str = 'Regular') -> bool:
        """Register a font file under a family name. Registering twice is a no-op."""
        if not path or not os.path.isfile(path):
            logger.warning('Font file %s not found, %s will fall back to %s', path, family, GENERIC_SANS)
            return False
        with self._lock:
            styles = self.fonts.setdefault(family, {})
            if styles.get(style) == path:
                return True
            styles[style] = path
        logger.info('Registered font %s (%s) from %s', family, style, path)
        return True

    def fonts_available(self) -> bool:
        return bool(self.fonts)

    def fontlist(self) -> List[str]:
        return sorted(self.fonts.keys())

    def resolve(self, family: str, weight: str = 'normal', slant: str = 'normal') -> Optional[str]:
        style_map = self.fonts.get(family)
        if not style_map:
            return None

        def find_with_keywords(keywords, exclude=()):
            for key, path in style_map.items():
                name = key.lower()
                if all(word in name for word in keywords) and not any(word in name for word in exclude):
                    return path
            return None

        regular = (style_map.get('Regular') or style_map.get('Book')
                   or find_with_keywords([], exclude=('bold', 'italic', 'oblique'))
                   or next(iter(style_map.values())))
        if weight == 'bold' and slant == 'italic':
            return (find_with_keywords(['bold', 'italic']) or find_with_keywords(['bold', 'oblique'])
                    or find_with_keywords(['bold']) or regular)
        if weight == 'bold':
            return find_with_keywords(['bold'], exclude=('italic', 'oblique')) or regular
        if slant == 'italic':
            return (find_with_keywords(['italic'], exclude=('bold',))
                    or find_with_keywords(['oblique'], exclude=('bold',)) or regular)
        return regular


class FontBook(object):
    """Memoising `FontSpec` -> Pillow font loader on top of a `Fonts` registry."""

    def __init__(self, fonts: Fonts, sans_family: str = 'DejaVu Sans',
                 mono_family: str = 'DejaVu Sans Mono'):
        self.fonts = fonts
        self.generic = {GENERIC_SANS: sans_family, GENERIC_MONO: mono_family}
        self._cache: Dict[FontSpec, LoadedFont] = {}

    def load(self, spec: FontSpec) -> LoadedFont:
        loaded = self._cache.get(spec)
        if loaded is None:
            loaded = self._load_uncached(spec)
            self._cache[spec] = loaded
        return loaded

    def _load_uncached(self, spec: FontSpec) -> LoadedFont:
        family = self.generic.get(spec.family, spec.family)
        path = self.fonts.resolve(family, spec.weight, spec.slant)
        if path is None and spec.family not in self.generic:
            # unknown named face, same fallback a canvas font stack would take
            return self.load(spec.with_family(GENERIC_SANS))
        if path is not None:
            loaded = self._truetype(path, spec.size)
            if loaded is not None:
                return loaded
        logger.debug('No usable font file for %s, using the built-in default', spec)
        return LoadedFont(ImageFont.load_default(size=spec.size))

    def _truetype(self, path: str, size: int) -> Optional[LoadedFont]:
        try:
            return LoadedFont(ImageFont.truetype(path, size))
        except OSError:
            pass
        for strike in EMOJI_STRIKE_SIZES:
            try:
                font = ImageFont.truetype(path, strike)
            except OSError:
                continue
            logger.debug('Loaded bitmap font %s at strike size %d', path, strike)
            return LoadedFont(font, size / strike)
        logger.warning('Could not load font file %s', path)
        return None


_registry: Optional[Fonts] = None
_registry_lock = threading.Lock()


def init_fonts(font_folder: str = '', emoji_path: str = '',
               emoji_family: str = 'Apple Emoji') -> Fonts:
    """Build the process-wide font registry once; later calls return it unchanged."""
    global _registry
    with _registry_lock:
        if _registry is None:
            registry = Fonts()
            registry.scan_global_fonts()
            if font_folder:
                registry.scan_fonts_folder(font_folder)
            if emoji_path:
                registry.register_font(emoji_path, emoji_family)
            _registry = registry
        return _registry


def get_fonts() -> Fonts:
    if _registry is None:
        from config import Config
        return init_fonts(Config.FONT_FOLDER, Config.EMOJI_FONT_PATH, Config.EMOJI_FONT_FAMILY)
    return _registry
