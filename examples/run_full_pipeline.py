"""
Run the full document QA pipeline on a folder of project documents.

Usage:
    python examples/run_full_pipeline.py [docs_dir]
"""
import os
import sys
import glob

# Add parent directory to path for construction_docs_qa import
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

print("=" * 60)
print("CONSTRUCTION DOCS QA - FULL PIPELINE TEST")
print("=" * 60)

from construction_docs_qa import DocumentQAPipeline, ProviderUnavailableError
from construction_docs_qa.extraction import is_supported

api_key = os.environ.get("OPENAI_API_KEY")
print(f"\n[1] OpenAI API key: {'Set' if api_key else 'Not set'}")
if not api_key:
    sys.exit("    Set OPENAI_API_KEY to run this example.")

print("\n[2] Initializing pipeline...")
pipeline = DocumentQAPipeline(max_chunk_chars=1200)
print(f"    LLM enabled: {pipeline.llm is not None}")

docs_dir = sys.argv[1] if len(sys.argv) > 1 else "sample_docs"
print(f"\n[3] Finding documents in {docs_dir}...")
paths = [p for p in sorted(glob.glob(os.path.join(docs_dir, "*"))) if is_supported(p)]
print(f"    Found {len(paths)} documents:")
for path in paths:
    print(f"      - {os.path.basename(path)}")

files = []
for path in paths:
    with open(path, "rb") as f:
        files.append((os.path.basename(path), f.read()))

print("\n[4] Ingesting (this may take a while)...")
result = pipeline.ingest(files)
print(f"    Files: {result.files}, chunks: {result.chunks}, time: {result.processing_time:.1f}s")
if result.skipped_files:
    print(f"    No text from: {', '.join(result.skipped_files)}")

print("\n[5] Semantic Search Tests:")
for query in ["slab thickness", "door hardware", "fire rating", "project schedule"]:
    print(f"\n    Query: '{query}'")
    for r in pipeline.query(query, k=2):
        preview = r.chunk.text[:80].replace('\n', ' ')
        print(f"      [#{r.rank}] Score: {r.score:.3f}  {r.chunk.source_label}")
        print(f"      {preview}...")

print("\n[6] Question Answering Tests:")
for question in ["What is the slab thickness?", "Who is the general contractor?"]:
    print(f"\n    Q: {question}")
    try:
        answer = pipeline.ask(question)
    except ProviderUnavailableError as e:
        print(f"    Error: {e} (retry later)")
        continue
    print(f"    A: {answer.answer}")
    for c in answer.citations[:3]:
        print(f"       - {c.source_label}: {c.snippet[:60]!r}")

print("\n[7] Final Statistics:")
stats = pipeline.get_stats()
print(f"    Total chunks indexed: {stats['total_chunks']}")
print(f"    Embedding model: {stats['embedding_model']}")
print(f"    Embedding dimension: {stats['embedding_dimension']}")
print(f"\n    Chunks by source:")
for source, count in stats['chunks_by_source'].items():
    print(f"      {source}: {count}")

print("\n" + "=" * 60)
print("PIPELINE TEST COMPLETE")
print("=" * 60)
