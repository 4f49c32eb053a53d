"""Default responder catalog.

Every responder is pure data: identity, priority, specialties, a keyword
rule for ``can_handle``, its tool allowlist and the static reply used when
generation is unavailable. ``TRIGGER_WORDS`` feeds the selector's trigger
bonus and is passed to the registry at construction.
"""

from typing import Dict, List, Mapping, Optional, Sequence

from concierge.core.registry import CapabilityRegistry, KeywordRule, ResponderDescriptor

BRAND_NAME = "concierge"

TRIGGER_WORDS: Dict[str, List[str]] = {
    "venture-launch": ["startup", "business plan", "mvp", "venture", "founder"],
    "primary": [BRAND_NAME, "about", "company", "ai", "platform"],
    "general-conversation": ["hello", "hi", "help", "general"],
}

# Phrases that mark a message as needing a specialist
SPECIALIZED_KEYWORDS = (
    "investment", "funding", "capital", "invest", "venture capital",
    "technical", "support", "bug", "error", "integration", "code",
    "research", "market", "analysis", "trends", "competitive",
    "marketing", "growth", "customer", "acquisition",
    "financial", "finance", "revenue", "valuation",
    "legal", "law", "compliance", "contract",
    "business plan", "startup", "venture", "launch", "mvp",
)

CONVERSATION_SPECIALIZED = (
    "investment", "funding", "capital", "venture", "portfolio", "due diligence",
    "market research", "analysis", "competitive", "intelligence", "swot",
    "market sizing", "tam", "sam", "som", "fundraising", "series a", "seed",
    "detailed analysis", "comprehensive report", "industry trends",
)

SIMPLE_QUERY_PREFIXES = ("about", "what is", "tell me about")


DEFAULT_RESPONDERS: List[ResponderDescriptor] = [
    ResponderDescriptor(
        id="primary",
        name="Concierge Primary Agent",
        description="Company information, general guidance and first-contact screening",
        specialties=("Company Information", "General Guidance", "Resource Navigation", "Initial Screening"),
        priority=10,
        matcher=KeywordRule(
            include=(BRAND_NAME, "company", "about", "help", "general", "info", "contact",
                     "ai", "artificial intelligence", "platform", "service"),
            fallback_unless=SPECIALIZED_KEYWORDS,
        ),
        system_prompt=(
            "You are the primary concierge for a venture studio. Answer questions about the "
            "company and its services, and point visitors to the right specialist."
        ),
        fallback_reply=(
            "Thanks for reaching out. I can tell you about our services, connect you with a "
            "specialist, or help you find the right resource. What would you like to know?"
        ),
    ),
    ResponderDescriptor(
        id="general-conversation",
        name="General Conversation Assistant",
        description="Greetings, small talk and simple follow-up questions",
        specialties=("Natural conversation", "Greetings and introductions", "Basic company information",
                     "General guidance and navigation", "Follow-up questions"),
        priority=80,
        matcher=KeywordRule(
            include=("hello", "hi", "hey", "greetings", "good morning", "good afternoon", "good evening",
                     "about", "help", "what", "who", "how", "where", "info", "information",
                     "tell me", "can you", "do you", "thanks", "thank you"),
            exclude=CONVERSATION_SPECIALIZED,
            accept_short=True,
        ),
        system_prompt="You are a friendly assistant. Keep answers short, warm and conversational.",
        fallback_reply="Hello! How can I help you today?",
    ),
    ResponderDescriptor(
        id="support",
        name="Support Specialist",
        description="Troubleshooting, account access and integration help",
        specialties=("Technical Troubleshooting", "Platform Integration", "API Support",
                     "Bug Resolution", "User Account Management", "System Configuration"),
        priority=85,
        matcher=KeywordRule(
            include=("help", "issue", "problem", "error", "bug", "broken", "not working",
                     "support", "troubleshoot", "fix", "resolve", "assistance",
                     "api", "integration", "setup", "configuration", "access",
                     "login", "account", "password", "permission", "authentication",
                     "urgent", "critical", "emergency", "down", "crash", "failure"),
        ),
        system_prompt=(
            "You are a technical support specialist. Diagnose the problem step by step and "
            "give concrete next actions."
        ),
        fallback_reply=(
            "Sorry you're running into trouble. Please share what you were doing, any error "
            "message you saw, and when it started, and we'll get it resolved."
        ),
    ),
    ResponderDescriptor(
        id="venture-launch",
        name="Venture Launch Builder",
        description="Business plans, MVP scoping and go-to-market for new ventures",
        specialties=("Business plan development", "Market validation", "Go-to-market strategy",
                     "Product-market fit", "Startup guidance", "MVP development"),
        priority=85,
        matcher=KeywordRule(
            include=("business plan", "startup", "venture", "launch", "mvp",
                     "product-market fit", "go-to-market", "market validation",
                     "business model", "startup advice", "entrepreneurship",
                     "venture building", "founder", "founding", "build company",
                     "idea validation", "customer development", "lean startup",
                     "pitch deck", "fundraising", "seed funding", "incubator",
                     "accelerator", "business development", "startup strategy",
                     "prototype", "minimum viable", "scalability", "growth strategy"),
        ),
        tools=("funding-calculator", "funding-stages"),
        system_prompt=(
            "You are a venture builder who helps founders go from idea to launch. Be practical "
            "and specific. When a burn-rate estimate would help, request it with "
            "[TOOL:funding-calculator:{\"team_size\": N, \"avg_salary\": X, \"months\": M}]."
        ),
        fallback_reply=(
            "Launching a venture starts with a clear problem, a narrow first customer and an "
            "MVP you can ship in weeks. Tell me about your idea and stage and I'll help you plan "
            "the next steps."
        ),
    ),
    ResponderDescriptor(
        id="competitive-intelligence",
        name="Competitive Intelligence System",
        description="Competitor research, positioning and market intelligence",
        specialties=("Market analysis", "Competitor research", "Industry trends",
                     "Strategic positioning", "SWOT analysis", "Market intelligence"),
        priority=80,
        matcher=KeywordRule(
            include=("competitor", "competition", "market analysis", "industry trends",
                     "competitive analysis", "market research", "swot", "positioning",
                     "market intelligence", "industry insights", "competitive landscape"),
        ),
        system_prompt=(
            "You are a competitive intelligence specialist. Analyze markets and competitors "
            "and give actionable, data-driven recommendations."
        ),
        fallback_reply=(
            "A useful competitive analysis covers direct and indirect competitors, their "
            "positioning, pricing and gaps you can exploit. Which market are you looking at?"
        ),
    ),
    ResponderDescriptor(
        id="research",
        name="Research Specialist",
        description="Market sizing, industry analysis and strategic research",
        specialties=("Market Research", "Competitive Analysis", "Industry Trends",
                     "Market Sizing", "Strategic Intelligence", "Data Analysis"),
        priority=70,
        matcher=KeywordRule(
            include=("research", "market analysis", "competitive analysis", "industry analysis",
                     "market sizing", "tam", "sam", "som", "competitive intelligence",
                     "market landscape", "industry trends"),
            min_length=50,
            excluded_prefixes=SIMPLE_QUERY_PREFIXES,
        ),
        system_prompt="You are a market research analyst. Structure findings clearly and cite assumptions.",
        fallback_reply=(
            "I can help size the market, map the landscape and summarize industry trends. "
            "Which segment and geography should the research focus on?"
        ),
    ),
    ResponderDescriptor(
        id="investment",
        name="Investment Specialist",
        description="Funding strategy, valuation and investor readiness",
        specialties=("Investment Analysis", "Funding Strategy", "Market Research",
                     "Portfolio Management", "Valuation", "Due Diligence"),
        priority=75,
        matcher=KeywordRule(
            include=("investment", "funding", "capital", "invest", "valuation", "portfolio",
                     "series", "seed", "venture capital", "equity", "raise", "funding round"),
            min_length=50,
            excluded_prefixes=SIMPLE_QUERY_PREFIXES,
            excluded_exact=("investment",),
        ),
        tools=("funding-calculator", "funding-stages"),
        system_prompt=(
            "You are an investment specialist advising early-stage companies on fundraising, "
            "valuation and investor relations."
        ),
        fallback_reply=(
            "Fundraising readiness comes down to traction, a credible use of funds and a clear "
            "story. Share your stage and how much you plan to raise and I'll outline options."
        ),
    ),
    ResponderDescriptor(
        id="financial",
        name="Financial Specialist",
        description="Financial modeling, unit economics and planning",
        specialties=("Financial Modeling", "Startup Valuation", "Unit Economics",
                     "Cash Flow Analysis", "Fundraising Strategy", "Financial Planning"),
        priority=76,
        matcher=KeywordRule(
            include=("financial", "finance", "money", "budget", "revenue", "profit",
                     "valuation", "modeling", "forecast", "cash flow", "burn rate",
                     "fundraising", "investor", "metrics", "unit economics", "ltv",
                     "cac", "arr", "mrr", "churn", "margins", "profitability",
                     "planning", "strategy", "projection", "scenario", "analysis",
                     "optimization", "pricing", "costs", "expenses"),
        ),
        tools=("funding-calculator",),
        system_prompt="You are a startup CFO. Be quantitative and state assumptions explicitly.",
        fallback_reply=(
            "To model this we'll need revenue drivers, cost structure and a target runway. "
            "Share what you have and I'll help build the numbers."
        ),
    ),
    ResponderDescriptor(
        id="marketing",
        name="Marketing Specialist",
        description="Growth marketing, acquisition and brand strategy",
        specialties=("Growth Marketing", "Customer Acquisition", "Brand Strategy",
                     "Content Marketing", "Digital Campaigns", "Performance Analytics"),
        priority=78,
        matcher=KeywordRule(
            include=("marketing", "growth", "customers", "acquisition", "campaign",
                     "brand", "branding", "content", "social media", "advertising",
                     "seo", "sem", "conversion", "traffic", "leads", "engagement",
                     "viral", "referral", "retention", "churn", "funnel",
                     "grow", "scale", "expand", "reach", "audience", "users",
                     "user growth", "customer growth", "market share"),
        ),
        system_prompt="You are a growth marketer. Recommend channels, experiments and metrics.",
        fallback_reply=(
            "Good growth starts with one channel that works. Tell me who your customers are "
            "and what you've tried so far."
        ),
    ),
    ResponderDescriptor(
        id="legal",
        name="Legal Specialist",
        description="Corporate, contract, IP and privacy questions",
        specialties=("Corporate Law", "Contract Review", "Intellectual Property",
                     "Regulatory Compliance", "Employment Law", "Privacy & Data Protection"),
        priority=77,
        matcher=KeywordRule(
            include=("legal", "law", "contract", "agreement", "terms", "compliance",
                     "intellectual property", "ip", "patent", "trademark", "copyright",
                     "privacy", "gdpr", "ccpa", "data protection", "regulatory",
                     "employment", "equity", "stock options", "vesting", "incorporation",
                     "liability", "risk", "lawsuit", "litigation", "dispute",
                     "nda", "non-disclosure", "terms of service", "privacy policy",
                     "employment agreement", "contractor agreement", "partnership"),
        ),
        system_prompt=(
            "You are a startup legal advisor. Explain issues plainly and note when a licensed "
            "attorney should be consulted."
        ),
        fallback_reply=(
            "This touches on legal questions that depend on jurisdiction and specifics. "
            "Share the context and I'll outline the key considerations."
        ),
    ),
    ResponderDescriptor(
        id="local",
        name="Local Market Specialist",
        description="Regional expansion, local compliance and market entry",
        specialties=("Local Market Analysis", "Regional Compliance", "Geographic Expansion",
                     "Cultural Business Practices", "Municipal Requirements", "Regional Partnerships"),
        priority=74,
        matcher=KeywordRule(
            include=("local", "regional", "city", "state", "country", "market", "area",
                     "location", "geographic", "territory", "jurisdiction", "municipal",
                     "expand", "expansion", "enter", "opening", "branch", "subsidiary",
                     "permit", "license", "zoning", "regulations", "compliance",
                     "chamber of commerce", "local business", "regional office",
                     "market entry", "cultural", "customs", "partnership"),
        ),
        system_prompt="You are a regional expansion advisor focused on local requirements and practices.",
        fallback_reply=(
            "Entering a new region means understanding local regulation, customers and "
            "partners. Which location are you considering?"
        ),
    ),
]


def build_default_registry(
    responders: Optional[Sequence[ResponderDescriptor]] = None,
    trigger_words: Optional[Mapping[str, Sequence[str]]] = None,
) -> CapabilityRegistry:
    """Create and seal a registry with the default catalog"""
    registry = CapabilityRegistry(trigger_words=TRIGGER_WORDS if trigger_words is None else trigger_words)
    registry.register_all(DEFAULT_RESPONDERS if responders is None else responders)
    registry.seal()
    return registry
