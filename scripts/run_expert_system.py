import sys
from pathlib import Path

# Add project root to path if not already there
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from core.cli import cli


if __name__ == "__main__":
    # python scripts/run_expert_system.py run knowledge_bases/medical.yaml -m Mixed -f fever
    cli()
