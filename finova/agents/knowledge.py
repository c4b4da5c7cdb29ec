"""
Static Finance Explanations

Short, self-contained explanations of common personal-finance terms.
Every function takes the AdviceContext and returns plain text; only the
header phrasing changes with the user's tone or complexity, never the
substance.

The ordered term table that decides WHICH explanation answers a message
lives in finova/agents/advice.py.
"""

from typing import Optional

from finova.models.insights import AdviceContext


BULLET = "•"


# =============================================================================
# INVESTMENT
# =============================================================================

def explain_sip(ctx: AdviceContext) -> str:
    response = (
        "SIP stands for Systematic Investment Plan!\n\n"
        if ctx.is_casual
        else "SIP (Systematic Investment Plan):\n\n"
    )
    response += (
        "SIP is a method of investing in mutual funds where you invest a fixed "
        "amount regularly (monthly, quarterly, etc.) instead of a lump sum.\n\n"
    )
    response += "Key Benefits:\n"
    response += (
        f"{BULLET} Rupee Cost Averaging - You buy more units when prices are low "
        "and fewer when prices are high\n"
    )
    response += f"{BULLET} Disciplined Investing - Regular investments build the habit of saving\n"
    response += f"{BULLET} Small Amounts - You can start with as little as $500-1000 per month\n"
    response += f"{BULLET} Flexibility - You can increase, decrease, pause, or stop anytime\n"
    response += f"{BULLET} Power of Compounding - Your money grows over time through reinvestment\n\n"

    if ctx.is_detailed:
        response += "How it works:\n"
        response += "1. Choose a mutual fund scheme\n"
        response += "2. Decide the amount and frequency (usually monthly)\n"
        response += "3. Set up auto-debit from your bank account\n"
        response += "4. The fund house automatically invests the amount on a fixed date\n"
        response += "5. You accumulate units in the fund over time\n\n"
        response += (
            "SIP is ideal for long-term goals like retirement, children's "
            "education, or buying a house."
        )
    else:
        response += (
            "SIP is perfect for long-term goals like retirement, education, or "
            "buying a house. Start small and invest regularly!"
        )
    return response


def explain_mutual_fund(ctx: AdviceContext) -> str:
    response = (
        "Mutual funds are a great investment option!\n\n"
        if ctx.is_casual
        else "Mutual Funds:\n\n"
    )
    response += (
        "A mutual fund pools money from many investors to buy a diversified "
        "portfolio of stocks, bonds, or other securities.\n\n"
    )
    response += "Benefits: Professional management, diversification, liquidity, and low minimum investment.\n"
    response += "Types: Equity funds (stocks), Debt funds (bonds), Hybrid funds (mix), and Index funds.\n"
    return response


def explain_equity(ctx: AdviceContext) -> str:
    return (
        "Equity represents ownership in a company. When you buy stocks, you own "
        "a portion of that company.\n\n"
        "Equity investments can offer higher returns but come with higher risk. "
        "Suitable for long-term goals.\n"
    )


def explain_stocks(ctx: AdviceContext) -> str:
    return (
        "Stocks (or shares) represent ownership in a company. Buying stocks makes "
        "you a shareholder.\n\n"
        "Stock prices fluctuate based on company performance and market "
        "conditions. Research before investing.\n"
    )


def explain_stock_market(ctx: AdviceContext) -> str:
    return (
        "The stock market is where buyers and sellers trade stocks of publicly "
        "listed companies.\n\n"
        "Major indices track market performance. Investing in stocks requires "
        "understanding market trends and company fundamentals.\n"
    )


def explain_portfolio(ctx: AdviceContext) -> str:
    return (
        "A portfolio is your collection of investments (stocks, bonds, mutual "
        "funds, etc.).\n\n"
        "A well-diversified portfolio spreads risk across different asset "
        "classes and sectors.\n"
    )


def explain_diversification(ctx: AdviceContext) -> str:
    return (
        "Diversification means spreading investments across different assets to "
        "reduce risk.\n\n"
        "Don't put all eggs in one basket. Invest in stocks, bonds, real estate, "
        "and other assets.\n"
    )


def explain_etf(ctx: AdviceContext) -> str:
    return (
        "ETF (Exchange Traded Fund) is a basket of securities that trades on "
        "stock exchanges like a stock.\n\n"
        "ETFs combine benefits of mutual funds (diversification) with stocks "
        "(trading flexibility). Lower fees than mutual funds.\n"
    )


def explain_index_fund(ctx: AdviceContext) -> str:
    return (
        "An index fund tracks a market index (like S&P 500) by holding the same "
        "securities in the same proportions.\n\n"
        "Low fees, passive management, and broad market exposure. Great for beginners.\n"
    )


def explain_bond(ctx: AdviceContext) -> str:
    return (
        "A bond is a loan you give to a company or government. They pay you "
        "interest and return the principal.\n\n"
        "Bonds are generally safer than stocks but offer lower returns. Good "
        "for conservative investors.\n"
    )


def explain_fixed_deposit(ctx: AdviceContext) -> str:
    return (
        "Fixed Deposit (FD) is a bank deposit with fixed interest rate and "
        "maturity date.\n\n"
        "Safe, guaranteed returns, but lower than market investments. Good for "
        "short-term goals.\n"
    )


def explain_recurring_deposit(ctx: AdviceContext) -> str:
    return (
        "Recurring Deposit (RD) lets you invest a fixed amount monthly for a "
        "fixed period.\n\n"
        "Disciplined savings with guaranteed returns. Similar to FD but with "
        "monthly contributions.\n"
    )


def explain_ppf(ctx: AdviceContext) -> str:
    return (
        "PPF (Public Provident Fund) is a long-term savings scheme with tax benefits.\n\n"
        "15-year lock-in, tax deductions under Section 80C, and tax-free "
        "interest. Great for retirement planning.\n"
    )


def explain_nsc(ctx: AdviceContext) -> str:
    return (
        "NSC (National Savings Certificate) is a fixed-income investment scheme.\n\n"
        "5-year maturity, tax benefits under Section 80C, and guaranteed returns "
        "backed by government.\n"
    )


# =============================================================================
# BANKING AND CREDIT
# =============================================================================

def explain_credit_score(ctx: AdviceContext) -> str:
    return (
        "Credit score (300-850) reflects your creditworthiness based on payment "
        "history and debt.\n\n"
        "Higher scores (700+) get better loan rates. Pay bills on time, keep "
        "debt low, and check your report regularly.\n"
    )


def explain_credit_card(ctx: AdviceContext) -> str:
    return (
        "Credit cards let you borrow money up to a limit. Pay full balance "
        "monthly to avoid interest.\n\n"
        "Use responsibly: pay on time, avoid minimum payments, and use rewards wisely.\n"
    )


def explain_emi(ctx: AdviceContext) -> str:
    return (
        "EMI (Equated Monthly Installment) is the fixed monthly payment for loans.\n\n"
        "Includes principal and interest. Lower EMI = longer tenure = more total "
        "interest. Find the right balance.\n"
    )


def explain_interest_rate(ctx: AdviceContext) -> str:
    return (
        "Interest rate is the cost of borrowing money or return on savings.\n\n"
        "APR (Annual Percentage Rate) shows true borrowing cost. Compare rates "
        "before taking loans.\n"
    )


def explain_compound_interest(ctx: AdviceContext) -> str:
    return (
        "Compound interest earns interest on interest, making money grow faster "
        "over time.\n\n"
        "The longer you invest, the more compounding benefits you get. Start "
        "early for maximum growth!\n"
    )


def explain_simple_interest(ctx: AdviceContext) -> str:
    return (
        "Simple interest is calculated only on the principal amount.\n\n"
        "Unlike compound interest, it doesn't earn interest on previous "
        "interest. Used for short-term loans.\n"
    )


def explain_credit(ctx: AdviceContext) -> str:
    return (
        "Credit is the ability to borrow money or access goods/services before payment.\n\n"
        "Use credit wisely: build good credit history, pay on time, and avoid "
        "excessive debt.\n"
    )


def explain_debit(ctx: AdviceContext) -> str:
    return (
        "Debit means money is taken out of your account immediately.\n\n"
        "Debit cards use your own money, unlike credit cards which borrow money.\n"
    )


# =============================================================================
# INSURANCE
# =============================================================================

def explain_insurance(ctx: AdviceContext) -> str:
    return (
        "Insurance protects you financially from unexpected events in exchange "
        "for premiums.\n\n"
        "Types: Life, health, auto, home insurance. Choose coverage based on "
        "your needs and risk.\n"
    )


def explain_life_insurance(ctx: AdviceContext) -> str:
    return (
        "Life insurance provides financial protection to your family if you pass away.\n\n"
        "Term insurance is pure protection, while whole life combines insurance "
        "with savings.\n"
    )


def explain_health_insurance(ctx: AdviceContext) -> str:
    return (
        "Health insurance covers medical expenses. Essential for protection "
        "against high healthcare costs.\n\n"
        "Compare plans, check coverage, deductibles, and network hospitals "
        "before choosing.\n"
    )


def explain_term_insurance(ctx: AdviceContext) -> str:
    return (
        "Term insurance provides pure life coverage for a fixed period at low premiums.\n\n"
        "No savings component, just protection. Best for those who need maximum "
        "coverage at minimum cost.\n"
    )


def explain_premium(ctx: AdviceContext) -> str:
    return (
        "Premium is the amount you pay regularly (monthly/annually) for "
        "insurance coverage.\n\n"
        "Higher premiums often mean better coverage. Compare premiums and "
        "benefits before choosing.\n"
    )


# =============================================================================
# TAX
# =============================================================================

def explain_income_tax(ctx: AdviceContext) -> str:
    return (
        "Income tax is a tax on your earnings. Rates vary by income level and country.\n\n"
        "Use deductions and exemptions to reduce taxable income legally.\n"
    )


def explain_gst(ctx: AdviceContext) -> str:
    return (
        "GST (Goods and Services Tax) is a consumption tax on goods and services.\n\n"
        "Paid by consumers but collected by businesses. Different rates for "
        "different product categories.\n"
    )


def explain_deduction(ctx: AdviceContext) -> str:
    return (
        "Tax deductions reduce your taxable income, lowering your tax bill.\n\n"
        "Common deductions: Section 80C (investments), medical expenses, home "
        "loan interest, education expenses.\n"
    )


def explain_80c(ctx: AdviceContext) -> str:
    return (
        "Section 80C allows tax deduction up to $1,500 (or equivalent) per year "
        "on eligible investments.\n\n"
        "Eligible: PPF, ELSS, NSC, life insurance premiums, home loan principal, "
        "children's tuition fees.\n"
    )


def explain_itr(ctx: AdviceContext) -> str:
    return (
        "ITR (Income Tax Return) is a form declaring your income and taxes paid "
        "for the year.\n\n"
        "File before deadline to avoid penalties. Keep documents ready and use "
        "e-filing for convenience.\n"
    )


# =============================================================================
# RETIREMENT
# =============================================================================

def explain_401k(ctx: AdviceContext) -> str:
    return (
        "401(k) is a US employer-sponsored retirement plan. Contributions are pre-tax.\n\n"
        "Many employers match contributions - take full advantage! Maximum "
        "contribution limits apply.\n"
    )


def explain_ira(ctx: AdviceContext) -> str:
    return (
        "IRA (Individual Retirement Account) is a personal retirement savings account.\n\n"
        "Traditional IRA: tax-deferred. Roth IRA: post-tax contributions, "
        "tax-free withdrawals. Choose based on your situation.\n"
    )


def explain_pension(ctx: AdviceContext) -> str:
    return (
        "Pension is a regular payment after retirement, typically from employer "
        "or government.\n\n"
        "Plan early for retirement. Consider pension plans, 401(k), IRA, and "
        "other retirement accounts.\n"
    )


def explain_epf(ctx: AdviceContext) -> str:
    return (
        "EPF (Employee Provident Fund) is a retirement savings scheme for employees.\n\n"
        "Both employer and employee contribute. Long-term savings with tax "
        "benefits and guaranteed returns.\n"
    )


# =============================================================================
# REAL ESTATE
# =============================================================================

def explain_home_loan(ctx: AdviceContext) -> str:
    return (
        "Home loan helps you buy property by borrowing money from a bank.\n\n"
        "Compare interest rates, processing fees, and tenure. Use EMI "
        "calculators to plan payments.\n"
    )


def explain_real_estate(ctx: AdviceContext) -> str:
    return (
        "Real estate includes land and buildings. Can be residential, "
        "commercial, or land.\n\n"
        "Real estate can appreciate but requires maintenance. Consider location, "
        "market trends, and your goals.\n"
    )


# =============================================================================
# SAVINGS AND ACCOUNTS
# =============================================================================

def explain_emergency_fund(ctx: AdviceContext) -> str:
    return (
        "Emergency fund is 3-6 months of expenses saved for unexpected situations.\n\n"
        "Keep it in a separate, easily accessible account. Don't use it for "
        "investments or expenses.\n"
    )


def explain_savings_account(ctx: AdviceContext) -> str:
    return (
        "Savings account earns interest on your deposits while keeping money accessible.\n\n"
        "Low interest rates but liquid. Good for emergency funds and short-term savings.\n"
    )


def explain_current_account(ctx: AdviceContext) -> str:
    return (
        "Current account is for business transactions with no interest but "
        "unlimited transactions.\n\n"
        "Used by businesses for daily operations. Different from savings accounts.\n"
    )


# =============================================================================
# DEBT
# =============================================================================

def explain_loan(ctx: AdviceContext) -> str:
    return (
        "A loan is borrowed money that must be repaid with interest over time.\n\n"
        "Types: Personal, home, car, education loans. Compare rates, tenure, "
        "and terms before borrowing.\n"
    )


def explain_personal_loan(ctx: AdviceContext) -> str:
    return (
        "Personal loan is unsecured credit for personal needs without collateral.\n\n"
        "Higher interest rates than secured loans. Use only for essential needs "
        "and pay off quickly.\n"
    )


def explain_education_loan(ctx: AdviceContext) -> str:
    return (
        "Education loan helps finance education expenses. Often has tax benefits.\n\n"
        "Lower interest rates, longer repayment periods. Research scholarships "
        "and grants first.\n"
    )


# =============================================================================
# PLANNING
# =============================================================================

def explain_financial_planning(ctx: AdviceContext) -> str:
    return (
        "Financial planning is managing money to achieve life goals through "
        "budgeting, saving, and investing.\n\n"
        "Steps: Set goals, create budget, build emergency fund, invest for "
        "growth, protect with insurance, plan retirement.\n"
    )


def explain_asset_allocation(ctx: AdviceContext) -> str:
    return (
        "Asset allocation is dividing investments among different asset classes "
        "(stocks, bonds, cash).\n\n"
        "Balance risk and return based on age, goals, and risk tolerance. "
        "Rebalance periodically.\n"
    )


def explain_risk(ctx: AdviceContext) -> str:
    return (
        "Investment risk is the possibility of losing money. Higher risk = "
        "higher potential returns.\n\n"
        "Assess your risk tolerance: Conservative (bonds, FDs), Moderate "
        "(balanced funds), Aggressive (stocks, equity).\n"
    )


def explain_inflation(ctx: AdviceContext) -> str:
    return (
        "Inflation is the increase in prices over time, reducing purchasing power.\n\n"
        "Your money loses value if returns don't beat inflation. Invest in "
        "growth assets to beat inflation.\n"
    )


# =============================================================================
# GENERIC CATEGORY EXPLANATIONS
# =============================================================================

# Words that make an unknown "what is X" question count as finance-related
FINANCE_KEYWORDS: tuple[str, ...] = (
    "finance", "financial", "money", "investment", "saving", "spending",
    "budget", "income", "expense", "wealth", "capital", "asset", "liability",
    "revenue", "profit", "loss", "return", "yield", "dividend", "interest",
    "loan", "credit", "debt", "equity", "stock", "share", "bond", "security",
    "fund", "portfolio", "market", "trading", "broker", "account", "bank",
    "insurance", "tax", "retirement", "pension", "annuity", "estate",
    "mortgage", "refinance", "liquidity", "volatility", "leverage", "margin",
)

# (keyword family, bucket text); first family with a hit in the topic wins
_CATEGORY_BUCKETS: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("investment", "invest", "fund", "stock", "equity"),
        "This appears to be related to investing. Here are some general principles:\n"
        f"{BULLET} Research before investing\n"
        f"{BULLET} Diversify your portfolio\n"
        f"{BULLET} Understand your risk tolerance\n"
        f"{BULLET} Consider your time horizon\n"
        f"{BULLET} Start with low-cost index funds if you're a beginner\n\n"
        "Would you like me to explain a specific investment term like SIP, "
        "mutual funds, or stocks?",
    ),
    (
        ("loan", "debt", "credit", "borrow"),
        "This seems related to borrowing or credit. Key points:\n"
        f"{BULLET} Compare interest rates before borrowing\n"
        f"{BULLET} Understand all terms and fees\n"
        f"{BULLET} Only borrow what you can afford to repay\n"
        f"{BULLET} Maintain a good credit score\n"
        f"{BULLET} Pay off high-interest debt first\n\n"
        "Would you like to know about specific loan types like personal loans, "
        "home loans, or how to manage debt?",
    ),
    (
        ("tax", "deduction"),
        "This appears to be a tax-related question. Important points:\n"
        f"{BULLET} Tax laws vary by country and change frequently\n"
        f"{BULLET} Use tax deductions and exemptions legally\n"
        f"{BULLET} Keep records of all financial transactions\n"
        f"{BULLET} Consider consulting a tax professional for specific advice\n\n"
        "Would you like to know about tax deductions, Section 80C, or filing tax returns?",
    ),
    (
        ("insurance", "premium", "coverage"),
        "This seems related to insurance. Key considerations:\n"
        f"{BULLET} Choose coverage based on your needs and risk\n"
        f"{BULLET} Compare premiums and benefits\n"
        f"{BULLET} Understand deductibles and coverage limits\n"
        f"{BULLET} Review and update policies regularly\n\n"
        "Would you like to know about life insurance, health insurance, or term insurance?",
    ),
    (
        ("saving", "emergency", "fund"),
        "This appears related to savings. Important points:\n"
        f"{BULLET} Build an emergency fund (3-6 months of expenses)\n"
        f"{BULLET} Automate your savings\n"
        f"{BULLET} Aim to save at least 10-20% of your income\n"
        f"{BULLET} Save for specific goals separately\n\n"
        "Would you like to know about emergency funds, savings strategies, or "
        "setting financial goals?",
    ),
    (
        ("retirement", "pension", "401k", "ira"),
        "This seems related to retirement planning. Key steps:\n"
        f"{BULLET} Start saving early for retirement\n"
        f"{BULLET} Contribute to employer-sponsored plans (401k, 403b)\n"
        f"{BULLET} Consider IRAs (Traditional or Roth)\n"
        f"{BULLET} Aim to save 10-15% of income for retirement\n"
        f"{BULLET} Diversify your retirement investments\n\n"
        "Would you like to know about 401(k), IRA, or general retirement planning?",
    ),
)


def is_finance_related(message: str, topic: str) -> bool:
    return any(k in message or k in topic for k in FINANCE_KEYWORDS)


def explain_category(topic: str, ctx: AdviceContext) -> Optional[str]:
    """
    Generic explanation for a finance topic with no dedicated entry.

    Returns None when the topic fits none of the keyword families; the
    caller then falls through to a conversational reply.
    """
    for family, body in _CATEGORY_BUCKETS:
        if any(word in topic for word in family):
            header = (
                f"Let me help you understand {topic}!\n\n"
                if ctx.is_casual
                else f"Regarding {topic}:\n\n"
            )
            return (
                header
                + f"I want to provide you with accurate information. {topic} is a "
                "financial term, and the specifics can vary based on context and "
                "location.\n\n"
                + body
            )
    return None
