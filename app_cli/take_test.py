from __future__ import annotations
import argparse
from lingua_core.config import DATA_DIR, TICK_SECONDS
from lingua_core.session import TestSession, SUBMITTED
from lingua_core.store import JsonStore
from lingua_core.catalog import list_tests
def ask(prompt: str, choices=None) -> str:
    if choices:
        print(prompt)
        for i,opt in enumerate(choices): print(f"  [{i}] {opt}")
        while True:
            v = input("Your choice (index, or :n :p to move, :s to submit): ").strip()
            if v in (":n",":p",":s"): return v
            if v.isdigit() and int(v) < len(choices): return choices[int(v)]
            print("Enter a listed index.")
    return input(prompt + "\n(:n :p to move, :s to submit)> ").strip()
def main():
    ap = argparse.ArgumentParser(description="Take a test in the terminal.")
    ap.add_argument("test_id", nargs="?")
    ap.add_argument("--user", default="cli-user")
    ap.add_argument("--lang", default="en")
    ap.add_argument("--data-dir", default=DATA_DIR)
    args = ap.parse_args()
    store = JsonStore(args.data_dir)
    if not args.test_id:
        for t in list_tests(store, lang=args.lang):
            print(f"{t['id']:<24} {t['test_type']:<10} {t['duration_minutes']:>3} min  {t['title']}")
        return
    session = TestSession(store, lambda: args.user, navigate=lambda target: print(f"-> {target}"), lang=args.lang)
    if not session.load(args.test_id):
        print(session.view()["message"]); return
    session.start_timer(TICK_SECONDS)
    try:
        while session.phase != SUBMITTED:
            view = session.view(); q = view["question"]
            print(f"\n[{view['clock']}] {view['title']}  {view['position']+1}/{view['question_count']}")
            v = ask(q["prompt"], q["choices"])
            if session.phase == SUBMITTED: break
            if v == ":n": session.advance(1)
            elif v == ":p": session.advance(-1)
            elif v == ":s":
                if not session.submit(): print(session.view()["message"])
            else:
                session.select_answer(q["id"], v)
                if view["position"] == view["question_count"] - 1:
                    if input("Submit now? [y/N] ").strip().lower() == "y" and not session.submit():
                        print(session.view()["message"])
                else:
                    session.advance(1)
    finally:
        session.close()
    res = session.result
    print(f"Done. Score {res.score:.1f}%  band {res.band_score:.1f}  status {res.status}")
if __name__ == "__main__": main()
