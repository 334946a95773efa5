"""Filesystem template set.

Mirrors the Helm `.Files.Glob "alerts/**.yaml"` convention: every file below
the templates root matching the glob is one fragment, its parent directory
(relative to the root) is the category and its stem is the identifier.
"""

import logging
from pathlib import Path

from rulegen.interfaces.template_set import BaseRuleTemplateSet, TemplateError, TemplateFragment
from rulegen.strategies.templates.parser import parse_fragment

logger = logging.getLogger(__name__)


class FilesystemTemplateSet(BaseRuleTemplateSet):
    """Loads template fragments from a directory tree."""

    def __init__(self, encoding: str = "utf-8") -> None:
        super().__init__()
        self._encoding = encoding

    def load(
        self,
        source_directory: str | Path,
        category_glob: str = "**/*.yaml",
        strict: bool = True,
    ) -> list[TemplateFragment]:
        root = Path(source_directory)
        if not root.is_dir():
            raise TemplateError("templates directory not found", source=str(root))

        self._fragments = []
        self._errors = []

        # Order by category path, then file name
        paths = sorted(
            (p for p in root.glob(category_glob) if p.is_file()),
            key=lambda p: (p.parent.relative_to(root).as_posix(), p.name),
        )
        logger.info(f"Loading {len(paths)} template fragments from {root} ({category_glob})")

        seen: dict[tuple[str, str], str] = {}
        for path in paths:
            try:
                fragment = self._load_file(root, path)
                key = (fragment.category, fragment.identifier)
                if key in seen:
                    raise TemplateError(
                        f"duplicate fragment '{fragment.key}' (also in {seen[key]})",
                        source=str(path),
                    )
            except TemplateError as e:
                if strict:
                    raise
                logger.warning(f"Skipping fragment: {e}")
                self._errors.append(e)
                continue

            seen[key] = str(path)
            self._fragments.append(fragment)
            logger.debug(
                f"Parsed fragment {fragment.key}: "
                f"{len(fragment.variables)} profile variables"
            )

        logger.info(
            f"Loaded {len(self._fragments)} fragments, {len(self._errors)} rejected"
        )
        return self.fragments

    def _load_file(self, root: Path, path: Path) -> TemplateFragment:
        category = path.parent.relative_to(root).as_posix()
        if category in ("", "."):
            raise TemplateError("fragment has no category directory", source=str(path))

        try:
            text = path.read_text(encoding=self._encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateError(f"unreadable file: {e}", source=str(path)) from e

        return TemplateFragment(
            identifier=path.stem,
            category=category,
            segments=parse_fragment(text, source=str(path)),
            source=str(path),
        )
