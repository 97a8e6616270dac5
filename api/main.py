from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from promptsmith import get_build_info
from promptsmith.config import load_settings
from promptsmith.errors import InvalidInputError
from promptsmith.models import Domain, RuleApplicationResult
from promptsmith.orchestrator import PromptOrchestrator
from promptsmith.store import SaveMetadata, SearchCriteria

app = FastAPI(title="PromptSmith API")


@lru_cache(maxsize=1)
def get_orchestrator() -> PromptOrchestrator:
    """Process-wide orchestrator; the registry inside it is read-only."""
    return PromptOrchestrator(load_settings())


class PromptRequest(BaseModel):
    prompt: str
    domain: Optional[str] = Field(default=None, description="Explicit domain; detected when omitted")


class DetectResponse(BaseModel):
    domain: Domain
    scores: Dict[str, int]


class RefineRequest(PromptRequest):
    context: Optional[str] = Field(default=None, description="Extra context appended to the system prompt")
    variables: Optional[Dict[str, Any]] = Field(default=None, description="Template variables; forces a template")
    template: Optional[str] = Field(default=None, description="Template type; picked from the wording when omitted")


class RefineResponse(BaseModel):
    original: str
    refined: str
    domain: Domain
    system_prompt: str
    rules_applied: List[str]
    improvements: List[str]
    score: dict
    suggestions: List[str]
    template_used: Optional[str] = None


class EvaluateResponse(BaseModel):
    score: dict
    domain: Domain
    breakdown: dict
    factors: List[dict]
    recommendations: List[dict]
    validation: dict
    confidence: float


class CompareRequest(BaseModel):
    """Request model for prompt comparison"""

    variants: List[str] = Field(..., description="Prompt variants, at least two")
    test_input: Optional[str] = Field(default=None, description="Value for {{input}} placeholders")


class SystemPromptRequest(BaseModel):
    domain: str
    prompt: Optional[str] = Field(default=None, description="Prompt analyzed to pick the template variant")
    context: Optional[str] = None


class SystemPromptResponse(BaseModel):
    domain: Domain
    system_prompt: str


class SaveRequest(BaseModel):
    prompt: str
    metadata: SaveMetadata


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/version")
async def version():
    """Return running package version and rule-set version."""
    return get_build_info()


@app.get("/domains")
async def domains(orchestrator: PromptOrchestrator = Depends(get_orchestrator)):
    """Registered domains with rule, enhancement, pattern and example counts."""
    return orchestrator.registry.get_domain_statistics()


@app.get("/templates")
async def templates_endpoint(
    domain: Optional[str] = None,
    template_type: Optional[str] = Query(default=None, alias="type"),
    orchestrator: PromptOrchestrator = Depends(get_orchestrator),
):
    """Registered prompt templates, optionally filtered by domain and type."""
    try:
        templates = orchestrator.templates.list_templates(domain, template_type)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"templates": [t.to_dict() for t in templates]}


@app.post("/detect", response_model=DetectResponse)
async def detect_endpoint(req: PromptRequest, orchestrator: PromptOrchestrator = Depends(get_orchestrator)):
    analysis = orchestrator.analyzer.analyze(req.prompt)
    scores = orchestrator.registry.detect_domain_scores(req.prompt, analysis)
    return DetectResponse(
        domain=orchestrator.registry.detect_domain(req.prompt, analysis),
        scores={domain.value: score for domain, score in scores.items()},
    )


@app.post("/refine", response_model=RefineResponse)
async def refine_endpoint(req: RefineRequest, orchestrator: PromptOrchestrator = Depends(get_orchestrator)):
    """Detect the domain (unless given), apply its rules and score the refined prompt."""
    try:
        result = orchestrator.process(req.prompt, req.domain, req.context, req.variables, req.template)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return RefineResponse(
        original=result.original,
        refined=result.refined,
        domain=result.domain,
        system_prompt=result.system_prompt,
        rules_applied=result.rules_applied,
        improvements=result.improvements,
        score=result.score.model_dump(mode="json"),
        suggestions=result.suggestions,
        template_used=result.template_used.value if result.template_used else None,
    )


@app.post("/rules", response_model=RuleApplicationResult)
async def rules_endpoint(req: PromptRequest, orchestrator: PromptOrchestrator = Depends(get_orchestrator)):
    """Apply one domain's rules without scoring."""
    analysis = orchestrator.analyzer.analyze(req.prompt)
    domain = orchestrator.resolve_domain(req.prompt, req.domain, analysis)
    return orchestrator.registry.apply_domain_rules(req.prompt, domain, analysis)


@app.post("/evaluate", response_model=EvaluateResponse)
async def evaluate_endpoint(req: PromptRequest, orchestrator: PromptOrchestrator = Depends(get_orchestrator)):
    try:
        result = orchestrator.evaluate(req.prompt, req.domain)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return EvaluateResponse(**result.to_dict())


@app.post("/compare")
async def compare_endpoint(req: CompareRequest, orchestrator: PromptOrchestrator = Depends(get_orchestrator)):
    """Rank prompt variants. Fewer than two variants is a 400."""
    try:
        result = orchestrator.compare(req.variants, req.test_input)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return result.model_dump(mode="json")


@app.post("/system-prompt", response_model=SystemPromptResponse)
async def system_prompt_endpoint(
    req: SystemPromptRequest, orchestrator: PromptOrchestrator = Depends(get_orchestrator)
):
    domain = Domain.parse(req.domain)
    analysis = orchestrator.analyzer.analyze(req.prompt) if req.prompt else None
    return SystemPromptResponse(
        domain=domain,
        system_prompt=orchestrator.registry.generate_system_prompt(domain, analysis, req.context),
    )


@app.post("/prompts")
async def save_endpoint(req: SaveRequest, orchestrator: PromptOrchestrator = Depends(get_orchestrator)):
    try:
        saved = orchestrator.save(req.prompt, req.metadata)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return saved.to_dict()


@app.get("/prompts/{prompt_id}")
async def get_prompt_endpoint(prompt_id: str, orchestrator: PromptOrchestrator = Depends(get_orchestrator)):
    saved = orchestrator.get(prompt_id)
    if saved is None:
        raise HTTPException(status_code=404, detail=f"Prompt not found: {prompt_id}")
    return saved.to_dict()


@app.post("/prompts/search")
async def search_endpoint(criteria: SearchCriteria, orchestrator: PromptOrchestrator = Depends(get_orchestrator)):
    results = orchestrator.search(criteria)
    return {"results": [r.to_dict() for r in results], "count": len(results)}
