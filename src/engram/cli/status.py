from __future__ import annotations

import sys

from engram.ai.generate import AISettings
from engram.db.workdb import open_work_store, store_kind


def register(app):
    @app.command()
    def status():
        try:
            with open_work_store() as work:
                print(f"Engram work: {work.work_dir.name}\n")

                print("Profile:")
                verified = "verified" if work.profile.verified else "unverified"
                print(f"  ✓ {work.profile.display_name} ({work.profile.initials}, {verified})")

                print("\nStore:")
                print(f"  ✓ {store_kind(work.cfg)}")

                ai = AISettings.from_config(work.cfg)
                print("\nAI:")
                if ai.api_key:
                    print(f"  ✓ {ai.model}")
                else:
                    print(f"  • disabled (set {ai.api_key_env})")

                topics = work.store.list_topics(work.owner_id)
                print("\nContent:")
                print(f"  • Topics: {len(topics)}")
        except RuntimeError as e:
            print(str(e))
            sys.exit(1)
