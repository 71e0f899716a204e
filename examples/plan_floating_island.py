"""Example pipeline: parse a schematic and plan the scaffolding that connects it."""

from scaffold_planner import format_plan, format_scaffolding, parse_schematic, plan_scaffolding, validate
from scaffold_planner.planner import PlanOptions

TEXT = """
{
  "size": [5, 4, 1],
  "blocks": [
    [0, 0, 0], [1, 0, 0], [2, 0, 0],
    [3, 3, 0], [4, 3, 0],
    [4, 2, 0, "attachment"],
    [0, 3, 0, "falling"]
  ]
}
"""


def main() -> None:
    schematic = parse_schematic(TEXT)
    validate(schematic)
    print(f"Blocks: {len(schematic)} in bounds {schematic.bounds.shape}")

    output = plan_scaffolding(schematic, PlanOptions(debug_checks=True))
    summary = output.summary()
    print(f"Root component: {summary['root']}")
    print(f"Merges: {summary['merges']}")
    print(format_scaffolding(output))

    print("\nLayers:")
    print(format_plan(output, schematic.bounds))


if __name__ == "__main__":
    main()
