#!/usr/bin/env python3
"""
Round-trip a skill through Mermaid and back.

Usage:
    python examples/roundtrip_demo.py ~/.claude/skills/github

Steps:
1. Parse the skill directory
2. Print the Mermaid diagram
3. Export with the parsed record (exact)
4. Export from the diagram alone (approximate)
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from skillflows import (
    DiagramMetadata,
    MermaidDiagram,
    SkillParser,
    export_to_skill,
    resolve_skill_source,
    skill_to_mermaid,
)


async def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    skill = await SkillParser().parse(sys.argv[1])
    print(f"Parsed {skill.name or '(unnamed)'}:")
    print(f"  principles: {len(skill.principles)}")
    print(f"  workflows:  {len(skill.workflows)}")
    print(f"  references: {len(skill.references)}")
    print(f"  routes:     {len(skill.routing)}")

    diagram = skill_to_mermaid(skill)
    print(f"\n{'='*60}\nMermaid\n{'='*60}")
    print(diagram.source)

    print(f"\n{'='*60}\nExport (exact)\n{'='*60}")
    print(export_to_skill(diagram))

    bare = MermaidDiagram(
        source=diagram.source,
        metadata=DiagramMetadata(source_type=diagram.metadata.source_type, source_path=skill.name),
    )
    source = resolve_skill_source(bare)
    print(f"\n{'='*60}\nExport (exact={source.is_exact})\n{'='*60}")
    print(export_to_skill(bare))


if __name__ == "__main__":
    asyncio.run(main())
