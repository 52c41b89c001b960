"""Static knowledge base for the Wings9 concierge and its chunk builder.

``KNOWLEDGE_BASE`` is the single source of truth about the firm, its
founder, its services and its business units.  ``build_chunks`` flattens it
into retrievable ``KnowledgeChunk`` passages in a fixed order.  A malformed
knowledge base is a configuration error: it raises ``KnowledgeBaseError``
so the process fails at startup instead of serving a partial pool.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from concierge.retrieval.chunks import NAME_KEY, ChunkCategory, KnowledgeChunk

logger = logging.getLogger(__name__)


class KnowledgeBaseError(Exception):
    """Raised when the static knowledge base cannot be turned into chunks."""


KNOWLEDGE_BASE: dict[str, Any] = {
    "principal": {
        "name": "Prakash Bhambhani",
        "role": "Founder & Strategic Advisor",
        "company": "Wings9",
        "focus": "Business advisory, real estate, compliance, and growth strategy",
        "approach": "Client-centric, compliance-first, long-term value creation",
        "description": (
            "Prakash Bhambhani is the founder and strategic leader behind Wings9, leading five "
            "trailblazing enterprises that shape the future of their domains. With over 20 years "
            "of experience in business advisory, real estate, and international expansion, "
            "Prakash has built a reputation for delivering exceptional results. He has guided "
            "hundreds of clients through complex business challenges, helping them navigate "
            "international markets, regulatory requirements, and strategic growth opportunities."
        ),
        "background": (
            "Prakash Bhambhani brings extensive expertise in international business development, "
            "having worked with clients across multiple continents. His understanding of UAE "
            "business regulations, real estate markets, and cross-border commerce makes him a "
            "trusted advisor for entrepreneurs and established businesses alike."
        ),
        "achievements": [
            "Successfully launched and scaled 5 companies under Wings9 umbrella",
            "Helped 100+ clients achieve their business expansion goals",
            "Expert in UAE business regulations and compliance",
            "Specialized in golden visa and investor programs",
            "Recognized for excellence in real estate investment consulting",
        ],
        "expertise": [
            "International business expansion",
            "Real estate investment",
            "Regulatory compliance",
            "Strategic business advisory",
            "Market entry strategies",
            "UAE business setup and licensing",
            "Golden visa and investor programs",
            "Cross-border commerce",
            "Business transformation",
            "Investment consulting",
        ],
        "values": [
            "Integrity and transparency in all business dealings",
            "Client success as the primary measure of achievement",
            "Compliance-first approach to business operations",
            "Long-term partnerships over short-term gains",
            "Innovation and adaptability in service delivery",
        ],
    },
    "firm": {
        "name": "Wings9",
        "full_name": "Wings9 Enterprises",
        "nature": "Multi-domain professional services firm",
        "markets": "UAE, Middle East, India, and international markets",
        "clients": "Entrepreneurs, SMEs, investors, corporates, startups, established businesses",
        "value_proposition": (
            "Comprehensive business solutions across multiple domains, from real estate to legal "
            "compliance, designed to help businesses scale and succeed in international markets."
        ),
        "approach": (
            "We provide end-to-end support, ensuring compliance, strategic planning, and "
            "sustainable growth for our clients."
        ),
        "mission": (
            "To empower businesses and entrepreneurs with comprehensive solutions that drive "
            "sustainable growth, ensure regulatory compliance, and unlock international market "
            "opportunities."
        ),
        "vision": (
            "To be the most trusted partner for businesses seeking to expand, grow, and succeed in "
            "international markets, particularly in the UAE and Middle East region."
        ),
        "history": (
            "Wings9 was founded with a vision to provide holistic business solutions that go "
            "beyond traditional consulting. The firm has evolved into a multi-domain powerhouse, "
            "operating five specialized companies that support businesses at every stage of their "
            "journey."
        ),
        "track_record": (
            "With 20+ years of combined experience, Wings9 has helped hundreds of clients navigate "
            "complex business challenges, achieve regulatory compliance, and scale internationally."
        ),
        "specialties": [
            "UAE business setup and licensing",
            "International business expansion",
            "Real estate investment and consulting",
            "Regulatory compliance and legal guidance",
            "Marketing and brand development",
            "Technology solutions and digital transformation",
            "Tax and accounting services",
            "Golden visa and investor programs",
        ],
    },
    "services": [
        {
            "id": "global-business-advisors",
            "name": "Global Business Advisors",
            "description": (
                "Strategic support for businesses seeking international expansion with tailored "
                "market entry strategies, compliance guidance, growth opportunities, and golden "
                "visa assistance."
            ),
            "what_it_does": (
                "Helps businesses expand internationally with market entry strategies, compliance "
                "guidance, and growth opportunities. Also assists with golden visa applications."
            ),
            "who_it_is_for": (
                "Businesses expanding internationally, entrepreneurs seeking market entry, "
                "investors needing compliance support, companies requiring golden visa assistance."
            ),
            "when_to_consult": (
                "When planning international expansion, needing compliance guidance, or requiring "
                "golden visa support."
            ),
            "key_features": [
                "International market entry strategies",
                "Compliance guidance",
                "Growth opportunities",
                "Golden visa assistance",
            ],
            "related_services": ["legal-embassy-guidance", "accounting-tax-services"],
        },
        {
            "id": "prime-realty",
            "name": "Prime Realty",
            "description": (
                "Comprehensive real estate services, including property sales, leasing, and "
                "investment consulting, designed for individuals and businesses alike."
            ),
            "what_it_does": (
                "Provides end-to-end real estate services including property sales, leasing, and "
                "investment consulting for residential and commercial properties."
            ),
            "who_it_is_for": (
                "Property buyers, sellers, investors, businesses needing commercial space, "
                "individuals seeking residential properties."
            ),
            "when_to_consult": (
                "When buying or selling property, needing investment advice, or requiring leasing "
                "services."
            ),
            "key_features": [
                "Property sales",
                "Leasing services",
                "Investment consulting",
                "Residential and commercial properties",
            ],
            "related_services": ["swift-property-solutions"],
        },
        {
            "id": "innovative-marketing",
            "name": "Innovative Marketing",
            "description": (
                "Innovative marketing strategies to enhance brand visibility, engage target "
                "audiences, and drive sustainable business growth."
            ),
            "what_it_does": (
                "Develops marketing strategies that increase brand visibility and engage target "
                "audiences through innovative campaigns."
            ),
            "who_it_is_for": (
                "Businesses needing brand visibility, startups requiring marketing strategies, "
                "established businesses looking to grow."
            ),
            "when_to_consult": (
                "When launching a new product, rebranding, or seeking to engage new audiences."
            ),
            "key_features": [
                "Brand visibility enhancement",
                "Target audience engagement",
                "Sustainable business growth strategies",
                "Marketing campaign development",
            ],
            "related_services": ["venture-launch-hub"],
        },
        {
            "id": "rental-dispute",
            "name": "Rental Dispute Resolution",
            "description": (
                "Resolving conflicts between landlords and tenants through mediation, negotiation, "
                "or legal processes as per UAE guidelines."
            ),
            "what_it_does": (
                "Provides mediation and legal support to resolve rental disputes between landlords "
                "and tenants in compliance with UAE regulations."
            ),
            "who_it_is_for": (
                "Landlords facing tenant disputes, tenants with landlord conflicts, property "
                "managers, property owners."
            ),
            "when_to_consult": (
                "When facing rental disputes, needing mediation, or requiring legal support for "
                "tenant-landlord issues."
            ),
            "key_features": [
                "Mediation services",
                "Negotiation support",
                "Legal processes",
                "UAE guidelines compliance",
            ],
            "related_services": ["legal-embassy-guidance", "prime-realty"],
        },
        {
            "id": "venture-launch-hub",
            "name": "Venture Launch Hub",
            "description": (
                "Supporting entrepreneurs with tailored business planning, funding solutions, and "
                "market strategies."
            ),
            "what_it_does": (
                "Supports entrepreneurs with business planning, funding solutions, and market entry "
                "strategies to launch and scale new ventures."
            ),
            "who_it_is_for": (
                "Entrepreneurs launching new businesses, startups needing planning support, "
                "founders seeking funding."
            ),
            "when_to_consult": (
                "When starting a new business, needing business planning, or seeking funding."
            ),
            "key_features": [
                "Business planning",
                "Funding solutions",
                "Market strategies",
                "Entrepreneur support",
            ],
            "related_services": ["global-business-advisors", "innovative-marketing"],
        },
        {
            "id": "swift-property-solutions",
            "name": "Swift Property Solutions",
            "description": (
                "Simplifying property transactions with efficient sales, rentals, and leasing "
                "services."
            ),
            "what_it_does": (
                "Streamlines property transactions with efficient sales, rental, and leasing "
                "services focused on speed and reliability."
            ),
            "who_it_is_for": (
                "Property buyers and sellers, tenants and landlords, businesses needing quick "
                "property solutions."
            ),
            "when_to_consult": (
                "When needing fast property transactions or streamlined leasing processes."
            ),
            "key_features": [
                "Property sales",
                "Rental services",
                "Leasing solutions",
                "Efficient transaction processing",
            ],
            "related_services": ["prime-realty"],
        },
        {
            "id": "sez-vision-advisory",
            "name": "SEZ Vision Advisory",
            "description": (
                "Expert guidance on Special Economic Zones (SEZs), including Make in India "
                "initiatives."
            ),
            "what_it_does": (
                "Provides consulting on Special Economic Zones and Make in India initiatives, "
                "covering investment opportunities and compliance requirements."
            ),
            "who_it_is_for": (
                "Businesses interested in SEZ investments, companies exploring Make in India, "
                "manufacturers planning an SEZ setup."
            ),
            "when_to_consult": (
                "When exploring SEZ investments or planning manufacturing setup in an SEZ."
            ),
            "key_features": [
                "SEZ guidance",
                "Make in India initiatives",
                "Economic zone consulting",
                "Investment opportunities",
            ],
            "related_services": ["global-business-advisors", "accounting-tax-services"],
        },
        {
            "id": "accounting-tax-services",
            "name": "Accounting and Tax Services",
            "description": (
                "Accounting, VAT registration, filing, and corporate tax compliance services."
            ),
            "what_it_does": (
                "Provides accounting and tax services including VAT registration, tax filing, and "
                "corporate tax compliance."
            ),
            "who_it_is_for": (
                "Businesses needing accounting services, companies requiring VAT registration or "
                "tax filing support."
            ),
            "when_to_consult": (
                "When starting a business, needing VAT registration, or requiring tax filing."
            ),
            "key_features": [
                "Accounting services",
                "VAT registration",
                "Tax filing",
                "Corporate tax compliance",
            ],
            "related_services": ["legal-embassy-guidance", "global-business-advisors"],
        },
        {
            "id": "legal-embassy-guidance",
            "name": "Legal and Embassy Guidance",
            "description": "Power of Attorney (POA) services and embassy-related guidance.",
            "what_it_does": (
                "Offers legal documentation services including Power of Attorney preparation and "
                "guidance for consular processes."
            ),
            "who_it_is_for": (
                "Individuals needing POA services, businesses requiring embassy documentation, "
                "people needing consular support."
            ),
            "when_to_consult": (
                "When needing Power of Attorney, embassy documentation, or consular services."
            ),
            "key_features": [
                "Power of Attorney (POA) services",
                "Embassy-related guidance",
                "Legal documentation",
                "Consular services support",
            ],
            "related_services": ["global-business-advisors"],
        },
    ],
    "business_units": [
        {
            "name": "Wings9 Consultancy",
            "description": (
                "Business consultancy providing strategic advisory, international expansion "
                "support, golden visa assistance, and help navigating UAE regulations."
            ),
            "focus": "Business consultancy, international expansion, golden visa, strategic advisory",
            "services": [
                "Business setup in UAE",
                "Golden visa applications",
                "Market entry strategies",
                "Compliance guidance",
                "Strategic business advisory",
            ],
            "target_audience": (
                "Entrepreneurs, investors, businesses seeking UAE expansion, companies needing "
                "compliance support"
            ),
        },
        {
            "name": "Wings9 Properties",
            "description": (
                "Premium real estate services offering property sales, leasing, investment "
                "consulting, and property management across the UAE."
            ),
            "focus": "Real estate services, property investment, sales and leasing",
            "services": [
                "Property sales",
                "Leasing services",
                "Investment consulting",
                "Property management",
                "Real estate advisory",
            ],
            "target_audience": "Property buyers, sellers, investors, businesses needing commercial space",
        },
        {
            "name": "Wings9 Vacation Homes",
            "description": (
                "Vacation rental and hospitality services helping property owners maximize returns "
                "through short-term rentals and vacation home management."
            ),
            "focus": "Vacation rentals, hospitality services, property management",
            "services": [
                "Vacation rental management",
                "Short-term rental services",
                "Hospitality consulting",
                "Property optimization",
            ],
            "target_audience": "Vacation property owners, hospitality investors, property managers",
        },
        {
            "name": "Wings9 Technology",
            "description": (
                "Technology solutions and digital transformation: enterprise software development, "
                "cloud solutions, AI integration, and technology consulting."
            ),
            "focus": "Technology solutions, digital transformation, software development",
            "services": [
                "Software development",
                "Cloud solutions",
                "Digital transformation",
                "Technology consulting",
                "AI and automation",
            ],
            "target_audience": (
                "Businesses needing digital transformation, startups requiring tech solutions"
            ),
        },
        {
            "name": "Wings9 Fashion",
            "description": (
                "Fashion and retail consulting: business strategy, market entry, brand development, "
                "and retail operations for fashion brands."
            ),
            "focus": "Fashion retail, brand development, retail consulting",
            "services": [
                "Fashion brand consulting",
                "Retail strategy",
                "Market entry for fashion brands",
                "Brand development",
            ],
            "target_audience": "Fashion brands, retailers, fashion entrepreneurs",
        },
    ],
    "contact": {
        "phone": "+971 56 760 9898",
        "whatsapp": "+971 56 760 9898",
        "email": "me.prakash.ae",
        "location": "United Arab Emirates (UAE)",
        "consultation_note": (
            "For consultations, please contact via phone, email, or WhatsApp. We offer free "
            "initial consultations to discuss your business needs."
        ),
        "availability": (
            "Available for consultations Monday through Friday. Response time typically within "
            "24 hours."
        ),
        "languages": "English, Hindi, and other regional languages supported",
    },
    "primary_objective": (
        "Help clients understand services, identify the right solution, and book consultations "
        "when appropriate."
    ),
    "why_choose": [
        "20+ years of combined experience in business advisory and real estate",
        "Comprehensive multi-domain expertise under one roof",
        "Deep understanding of UAE regulations and business practices",
        "Proven track record with 100+ successful client engagements",
        "Client-centric approach with personalized service",
        "End-to-end support from planning to execution",
        "Compliance-first approach ensuring regulatory adherence",
    ],
    "industries_served": [
        "Technology and Software",
        "Real Estate and Property Development",
        "Retail and E-commerce",
        "Fashion and Apparel",
        "Hospitality and Tourism",
        "Manufacturing",
        "Professional Services",
        "Healthcare",
        "Education",
        "Financial Services",
    ],
    "common_use_cases": [
        "Setting up a business in UAE",
        "Expanding business internationally",
        "Obtaining golden visa for investors",
        "Buying or selling property in UAE",
        "Resolving rental disputes",
        "VAT registration and tax compliance",
        "Digital transformation initiatives",
        "Market entry strategies",
        "Business licensing and regulatory compliance",
    ],
}


# ── Chunk builders ───────────────────────────────────────────────────


def _require(section: Mapping[str, Any], key: str, where: str) -> Any:
    try:
        value = section[key]
    except (KeyError, TypeError):
        raise KnowledgeBaseError(f"Knowledge base is missing '{where}.{key}'") from None
    if value in (None, "", []):
        raise KnowledgeBaseError(f"Knowledge base field '{where}.{key}' is empty")
    return value


def _principal_chunks(kb: Mapping[str, Any]) -> list[KnowledgeChunk]:
    person = _require(kb, "principal", "kb")
    name = _require(person, "name", "principal")
    achievements = person.get("achievements") or []
    values = person.get("values") or []
    chunks = [
        KnowledgeChunk(
            id="principal-profile",
            text=(
                f"{name} is the {_require(person, 'role', 'principal')} behind "
                f"{_require(person, 'company', 'principal')}. "
                f"{_require(person, 'description', 'principal')} {person.get('background', '')} "
                f"His approach is {_require(person, 'approach', 'principal')}. "
                f"Expertise areas: {', '.join(person.get('expertise') or [])}."
            ),
            category=ChunkCategory.PERSON_PROFILE,
            metadata={
                NAME_KEY: name,
                "role": person["role"],
                "focus": person.get("focus", ""),
                "approach": person["approach"],
            },
        ),
    ]
    if achievements:
        chunks.append(KnowledgeChunk(
            id="principal-achievements",
            text=f"{name}'s key achievements: {'. '.join(achievements)}.",
            category=ChunkCategory.PERSON_PROFILE,
            metadata={NAME_KEY: name, "achievements": achievements},
        ))
    if values:
        chunks.append(KnowledgeChunk(
            id="principal-values",
            text=f"{name}'s core values: {'. '.join(values)}.",
            category=ChunkCategory.PERSON_PROFILE,
            metadata={NAME_KEY: name, "values": values},
        ))
    return chunks


def _firm_chunks(kb: Mapping[str, Any]) -> list[KnowledgeChunk]:
    firm = _require(kb, "firm", "kb")
    name = _require(firm, "name", "firm")
    org = ChunkCategory.ORGANIZATION_PROFILE
    chunks = [
        KnowledgeChunk(
            id="firm-overview",
            text=(
                f"{name} ({firm.get('full_name', name)}) is a {_require(firm, 'nature', 'firm')} "
                f"operating in {_require(firm, 'markets', 'firm')}. "
                f"We serve {_require(firm, 'clients', 'firm')}. "
                f"{firm.get('value_proposition', '')} {firm.get('approach', '')}"
            ).strip(),
            category=org,
            metadata={
                NAME_KEY: name,
                "nature": firm["nature"],
                "markets": firm["markets"],
            },
        ),
    ]
    if firm.get("mission"):
        chunks.append(KnowledgeChunk(
            id="firm-mission",
            text=f"{name} Mission: {firm['mission']} Vision: {firm.get('vision', '')}",
            category=org,
            metadata={"mission": firm["mission"], "vision": firm.get("vision", "")},
        ))
    if firm.get("history"):
        chunks.append(KnowledgeChunk(
            id="firm-history",
            text=f"{name} History: {firm['history']} Track Record: {firm.get('track_record', '')}",
            category=org,
            metadata={"history": firm["history"], "track_record": firm.get("track_record", "")},
        ))
    if firm.get("specialties"):
        chunks.append(KnowledgeChunk(
            id="firm-specialties",
            text=f"{name} Specialties: {', '.join(firm['specialties'])}.",
            category=org,
            metadata={"specialties": firm["specialties"]},
        ))

    for key, chunk_id, lead, sep in (
        ("why_choose", "firm-why-choose", f"Why choose {name}", ". "),
        ("industries_served", "firm-industries", f"{name} serves clients across these industries", ", "),
        ("common_use_cases", "firm-use-cases", f"Common use cases for {name} services", ", "),
    ):
        items = kb.get(key) or []
        if items:
            chunks.append(KnowledgeChunk(
                id=chunk_id,
                text=f"{lead}: {sep.join(items)}.",
                category=org,
                metadata={key: items},
            ))

    chunks.append(KnowledgeChunk(
        id="firm-objective",
        text=f"Primary objective: {_require(kb, 'primary_objective', 'kb')}",
        category=org,
    ))
    return chunks


def _service_chunks(kb: Mapping[str, Any]) -> list[KnowledgeChunk]:
    chunks = []
    for index, service in enumerate(_require(kb, "services", "kb")):
        where = f"services[{index}]"
        service_id = _require(service, "id", where)
        name = _require(service, "name", where)
        chunks.append(KnowledgeChunk(
            id=f"service-{service_id}",
            text=(
                f"{name}: {_require(service, 'description', where)} "
                f"What it does: {service.get('what_it_does', '')} "
                f"Who it's for: {service.get('who_it_is_for', '')} "
                f"When to consult: {service.get('when_to_consult', '')} "
                f"Key features: {', '.join(service.get('key_features') or [])}."
            ),
            category=ChunkCategory.SERVICE,
            metadata={
                NAME_KEY: name,
                "service_id": service_id,
                "what_it_does": service.get("what_it_does", ""),
                "who_it_is_for": service.get("who_it_is_for", ""),
                "when_to_consult": service.get("when_to_consult", ""),
                "related_services": list(service.get("related_services") or []),
            },
        ))
    return chunks


def _business_unit_chunks(kb: Mapping[str, Any]) -> list[KnowledgeChunk]:
    chunks = []
    for index, unit in enumerate(_require(kb, "business_units", "kb")):
        where = f"business_units[{index}]"
        name = _require(unit, "name", where)
        services = unit.get("services") or []
        services_text = f" Services: {', '.join(services)}." if services else ""
        audience = unit.get("target_audience")
        audience_text = f" Target audience: {audience}." if audience else ""
        chunks.append(KnowledgeChunk(
            id=f"business-unit-{index}",
            text=(
                f"{name}: {_require(unit, 'description', where)} "
                f"Focus: {_require(unit, 'focus', where)}.{services_text}{audience_text}"
            ),
            category=ChunkCategory.BUSINESS_UNIT,
            metadata={
                NAME_KEY: name,
                "focus": unit["focus"],
                "services": list(services),
                "target_audience": audience or "",
            },
        ))
    return chunks


def _contact_chunk(kb: Mapping[str, Any]) -> KnowledgeChunk:
    contact = _require(kb, "contact", "kb")
    phone = _require(contact, "phone", "contact")
    return KnowledgeChunk(
        id="contact-info",
        text=(
            f"Contact information: Phone {phone}, "
            f"WhatsApp {contact.get('whatsapp') or phone}, "
            f"Email {_require(contact, 'email', 'contact')}. "
            f"Location: {contact.get('location') or 'UAE'}. "
            f"{contact.get('consultation_note', '')} "
            f"Availability: {contact.get('availability') or 'Available for consultations'}. "
            f"Languages supported: {contact.get('languages') or 'English'}."
        ),
        category=ChunkCategory.CONTACT_INFO,
        metadata=dict(contact),
    )


def build_chunks(kb: Mapping[str, Any] = KNOWLEDGE_BASE) -> list[KnowledgeChunk]:
    """Flatten the knowledge base into retrievable chunks.

    Deterministic: the same knowledge base always yields the same chunks in
    the same order.  Raises ``KnowledgeBaseError`` on a malformed base.
    """
    if not isinstance(kb, Mapping):
        raise KnowledgeBaseError("Knowledge base must be a mapping")

    chunks = [
        *_principal_chunks(kb),
        *_firm_chunks(kb),
        *_service_chunks(kb),
        *_business_unit_chunks(kb),
        _contact_chunk(kb),
    ]

    seen: set[str] = set()
    for chunk in chunks:
        if chunk.id in seen:
            raise KnowledgeBaseError(f"Duplicate knowledge chunk id: {chunk.id}")
        seen.add(chunk.id)

    logger.debug("Built %d knowledge chunks", len(chunks))
    return chunks
