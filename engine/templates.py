"""
Static website template bank.

Three complete, hand-written bundles used two ways: as the style reference
handed to the builder model, and as the terminal fallback when generation
fails outright. Every bundle passes the validator on its own.
"""

from dataclasses import dataclass
from typing import List

from engine.validator import GeneratedCode


@dataclass(frozen=True)
class TemplateBundle:
    id: str
    name: str
    name_ar: str
    category: str
    html: str
    css: str
    js: str

    def to_code(self) -> GeneratedCode:
        return GeneratedCode(html=self.html, css=self.css, js=self.js)


# Shared foundation; each template appends its own section styles
_BASE_CSS = """:root {
  --primary: #6366f1;
  --secondary: #8b5cf6;
  --accent: #06b6d4;
  --background: #ffffff;
  --surface: #f8fafc;
  --text: #1e293b;
  --muted: #64748b;
  --radius: 16px;
  --shadow: 0 10px 30px rgba(15, 23, 42, 0.08);
  --gradient: linear-gradient(135deg, #6366f1 0%, #8b5cf6 100%);
}
* { margin: 0; padding: 0; box-sizing: border-box; }
html { scroll-behavior: smooth; }
body { font-family: 'Tajawal', 'Inter', sans-serif; color: var(--text); background: var(--background); line-height: 1.7; }
.container { width: min(1200px, 92%); margin: 0 auto; }
.navbar { position: sticky; top: 0; z-index: 50; background: rgba(255, 255, 255, 0.9); backdrop-filter: blur(12px); border-bottom: 1px solid #e2e8f0; }
.navbar .container { display: flex; align-items: center; justify-content: space-between; padding: 1rem 0; }
.logo { font-weight: 800; font-size: 1.4rem; color: var(--primary); text-decoration: none; }
.nav-links { display: flex; gap: 1.5rem; list-style: none; }
.nav-links a { color: var(--text); text-decoration: none; font-weight: 500; transition: color 0.3s ease; }
.nav-links a:hover { color: var(--primary); }
.menu-toggle { display: none; background: none; border: 0; color: var(--text); cursor: pointer; }
.btn { display: inline-flex; align-items: center; gap: 0.5rem; padding: 0.85rem 1.8rem; border-radius: 999px; border: 0; font-weight: 700; cursor: pointer; text-decoration: none; transition: all 0.3s ease; }
.btn-primary { background: var(--gradient); color: #fff; }
.btn-primary:hover { transform: translateY(-2px); box-shadow: 0 12px 24px rgba(99, 102, 241, 0.35); }
.btn-outline { border: 2px solid var(--primary); color: var(--primary); background: transparent; }
.btn-outline:hover { background: var(--primary); color: #fff; }
.icon { width: 1.25em; height: 1.25em; display: inline-block; vertical-align: middle; }
section { padding: 5rem 0; }
.section-title { font-size: 2.2rem; text-align: center; margin-bottom: 0.75rem; }
.section-subtitle { text-align: center; color: var(--muted); margin-bottom: 3rem; }
.grid { display: grid; grid-template-columns: repeat(3, 1fr); gap: 1.5rem; }
.card { background: #fff; border-radius: var(--radius); padding: 2rem; box-shadow: var(--shadow); transition: transform 0.3s ease, box-shadow 0.3s ease; }
.card:hover { transform: translateY(-4px); box-shadow: 0 20px 40px rgba(15, 23, 42, 0.12); }
.card .icon { width: 2.5rem; height: 2.5rem; color: var(--primary); margin-bottom: 1rem; }
.footer { background: var(--text); color: #cbd5e1; padding: 3rem 0; }
.footer .container { display: flex; justify-content: space-between; flex-wrap: wrap; gap: 1rem; }
.footer a { color: #cbd5e1; text-decoration: none; transition: color 0.3s ease; }
.footer a:hover { color: #fff; }
.reveal { opacity: 0; transform: translateY(20px); transition: opacity 0.6s ease, transform 0.6s ease; }
.reveal.visible { opacity: 1; transform: none; }
@media (max-width: 1280px) {
  .grid { grid-template-columns: repeat(2, 1fr); }
}
@media (max-width: 768px) {
  .nav-links { display: none; }
  .nav-links.open { display: flex; flex-direction: column; position: absolute; top: 100%; inset-inline: 0; background: #fff; padding: 1rem; }
  .menu-toggle { display: block; }
  .grid { grid-template-columns: 1fr; }
  .section-title { font-size: 1.7rem; }
}
"""

_BASE_JS = """document.querySelectorAll('a[href^="#"]').forEach(function (link) {
  link.addEventListener('click', function (event) {
    var target = document.querySelector(link.getAttribute('href'));
    if (target) {
      event.preventDefault();
      target.scrollIntoView({ behavior: 'smooth' });
    }
  });
});

var toggle = document.querySelector('.menu-toggle');
if (toggle) {
  toggle.addEventListener('click', function () {
    document.querySelector('.nav-links').classList.toggle('open');
  });
}

var observer = new IntersectionObserver(function (entries) {
  entries.forEach(function (entry) {
    if (entry.isIntersecting) {
      entry.target.classList.add('visible');
    }
  });
}, { threshold: 0.15 });
document.querySelectorAll('.reveal').forEach(function (el) { observer.observe(el); });
"""

_ICON_CART = ('<svg class="icon" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">'
              '<circle cx="9" cy="21" r="1"/><circle cx="20" cy="21" r="1"/>'
              '<path d="M1 1h4l2.68 13.39a2 2 0 0 0 2 1.61h9.72a2 2 0 0 0 2-1.61L23 6H6"/></svg>')
_ICON_TRUCK = ('<svg class="icon" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">'
               '<rect x="1" y="3" width="15" height="13"/><polygon points="16 8 20 8 23 11 23 16 16 16 16 8"/>'
               '<circle cx="5.5" cy="18.5" r="2.5"/><circle cx="18.5" cy="18.5" r="2.5"/></svg>')
_ICON_SHIELD = ('<svg class="icon" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">'
                '<path d="M12 22s8-4 8-10V5l-8-3-8 3v7c0 6 8 10 8 10z"/></svg>')
_ICON_REFRESH = ('<svg class="icon" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">'
                 '<path d="M23 4v6h-6"/><path d="M1 20v-6h6"/>'
                 '<path d="M3.51 9a9 9 0 0 1 14.85-3.36L23 10M1 14l4.64 4.36A9 9 0 0 0 20.49 15"/></svg>')
_ICON_CODE = ('<svg class="icon" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">'
              '<polyline points="16 18 22 12 16 6"/><polyline points="8 6 2 12 8 18"/></svg>')
_ICON_LAYERS = ('<svg class="icon" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">'
                '<polygon points="12 2 2 7 12 12 22 7 12 2"/><polyline points="2 17 12 22 22 17"/>'
                '<polyline points="2 12 12 17 22 12"/></svg>')
_ICON_ZAP = ('<svg class="icon" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">'
             '<polygon points="13 2 3 14 12 14 11 22 21 10 12 10 13 2"/></svg>')
_ICON_MENU = ('<svg class="icon" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">'
              '<line x1="3" y1="12" x2="21" y2="12"/><line x1="3" y1="6" x2="21" y2="6"/>'
              '<line x1="3" y1="18" x2="21" y2="18"/></svg>')


ECOMMERCE_TEMPLATE = TemplateBundle(
    id="ecommerce",
    name="Modern Store",
    name_ar="متجر عصري",
    category="ecommerce",
    html=f"""<!DOCTYPE html>
<html lang="ar" dir="rtl">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>متجر أناقة</title>
  <link href="https://fonts.googleapis.com/css2?family=Tajawal:wght@400;500;700;800&display=swap" rel="stylesheet">
</head>
<body>
  <nav class="navbar">
    <div class="container">
      <a href="#home" class="logo">أناقة</a>
      <ul class="nav-links">
        <li><a href="#home">الرئيسية</a></li>
        <li><a href="#products">المنتجات</a></li>
        <li><a href="#benefits">لماذا نحن</a></li>
        <li><a href="#contact">تواصل معنا</a></li>
      </ul>
      <button class="menu-toggle" aria-label="القائمة">{_ICON_MENU}</button>
    </div>
  </nav>

  <section id="home" class="hero">
    <div class="container hero-content">
      <h1>تسوق أحدث المنتجات بأفضل الأسعار</h1>
      <p>تشكيلة مختارة بعناية مع شحن سريع وإرجاع مجاني خلال ثلاثين يوما.</p>
      <a href="#products" class="btn btn-primary">{_ICON_CART} تسوق الآن</a>
    </div>
  </section>

  <section id="products" class="products">
    <div class="container">
      <h2 class="section-title">الأكثر مبيعا</h2>
      <p class="section-subtitle">منتجات يحبها عملاؤنا</p>
      <div class="grid">
        <article class="card product reveal">
          <div class="product-image"></div>
          <h3>سماعات لاسلكية</h3>
          <p class="price">249 ر.س</p>
          <button class="btn btn-outline add-to-cart">{_ICON_CART} أضف إلى السلة</button>
        </article>
        <article class="card product reveal">
          <div class="product-image"></div>
          <h3>ساعة ذكية</h3>
          <p class="price">599 ر.س</p>
          <button class="btn btn-outline add-to-cart">{_ICON_CART} أضف إلى السلة</button>
        </article>
        <article class="card product reveal">
          <div class="product-image"></div>
          <h3>حقيبة جلدية</h3>
          <p class="price">329 ر.س</p>
          <button class="btn btn-outline add-to-cart">{_ICON_CART} أضف إلى السلة</button>
        </article>
      </div>
    </div>
  </section>

  <section id="benefits" class="benefits">
    <div class="container grid">
      <div class="card reveal">{_ICON_TRUCK}<h3>شحن سريع</h3><p>توصيل خلال يومين إلى جميع المدن.</p></div>
      <div class="card reveal">{_ICON_SHIELD}<h3>دفع آمن</h3><p>حماية كاملة لبياناتك مع كل عملية شراء.</p></div>
      <div class="card reveal">{_ICON_REFRESH}<h3>إرجاع مجاني</h3><p>استبدال أو استرجاع بدون أي رسوم.</p></div>
    </div>
  </section>

  <section id="contact" class="newsletter">
    <div class="container">
      <h2 class="section-title">اشترك في نشرتنا</h2>
      <p class="section-subtitle">احصل على خصم عشرة بالمئة على طلبك الأول</p>
      <form class="newsletter-form">
        <input type="email" placeholder="بريدك الإلكتروني" required>
        <button type="submit" class="btn btn-primary">اشترك</button>
      </form>
    </div>
  </section>

  <footer class="footer">
    <div class="container">
      <p>جميع الحقوق محفوظة لمتجر أناقة</p>
      <a href="#home">العودة للأعلى</a>
    </div>
  </footer>
  <div class="cart-badge">السلة: <span id="cart-count">0</span></div>
</body>
</html>""",
    css=_BASE_CSS + """
.hero { background: var(--gradient); color: #fff; text-align: center; padding: 7rem 0; }
.hero h1 { font-size: 3rem; margin-bottom: 1rem; }
.hero p { font-size: 1.2rem; opacity: 0.9; margin-bottom: 2rem; }
.hero .btn-primary { background: #fff; color: var(--primary); }
.product-image { aspect-ratio: 4 / 3; border-radius: 12px; background: var(--surface); margin-bottom: 1rem; }
.price { color: var(--primary); font-weight: 800; font-size: 1.25rem; margin: 0.5rem 0 1rem; }
.benefits { background: var(--surface); }
.newsletter-form { display: flex; gap: 0.75rem; justify-content: center; flex-wrap: wrap; }
.newsletter-form input { padding: 0.85rem 1.2rem; border-radius: 999px; border: 1px solid #cbd5e1; min-width: 280px; font-family: inherit; }
.cart-badge { position: fixed; bottom: 1.5rem; inset-inline-start: 1.5rem; background: var(--primary); color: #fff; padding: 0.6rem 1.2rem; border-radius: 999px; box-shadow: var(--shadow); }
@media (max-width: 768px) {
  .hero h1 { font-size: 2rem; }
}
""",
    js=_BASE_JS + """
var cartCount = 0;
document.querySelectorAll('.add-to-cart').forEach(function (button) {
  button.addEventListener('click', function () {
    cartCount += 1;
    document.getElementById('cart-count').textContent = cartCount;
  });
});
""",
)


PORTFOLIO_TEMPLATE = TemplateBundle(
    id="portfolio",
    name="Developer Portfolio",
    name_ar="معرض أعمال مطور",
    category="portfolio",
    html=f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Sara Haddad | Full-Stack Developer</title>
  <link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;600;800&display=swap" rel="stylesheet">
</head>
<body>
  <nav class="navbar">
    <div class="container">
      <a href="#about" class="logo">Sara.dev</a>
      <ul class="nav-links">
        <li><a href="#about">About</a></li>
        <li><a href="#skills">Skills</a></li>
        <li><a href="#projects">Projects</a></li>
        <li><a href="#contact">Contact</a></li>
      </ul>
      <button class="menu-toggle" aria-label="Menu">{_ICON_MENU}</button>
    </div>
  </nav>

  <section id="about" class="intro">
    <div class="container intro-content">
      <p class="eyebrow">Full-stack developer</p>
      <h1>I build fast, accessible products for the web.</h1>
      <p>Eight years shipping TypeScript, Python and cloud infrastructure for startups and public-sector teams.</p>
      <div class="intro-actions">
        <a href="#projects" class="btn btn-primary">View my work</a>
        <a href="#contact" class="btn btn-outline">Get in touch</a>
      </div>
    </div>
  </section>

  <section id="skills" class="skills">
    <div class="container">
      <h2 class="section-title">What I do</h2>
      <p class="section-subtitle">From database schema to pixel-perfect interfaces</p>
      <div class="grid">
        <div class="card reveal">{_ICON_CODE}<h3>Frontend</h3><p>React, design systems and performance budgets.</p></div>
        <div class="card reveal">{_ICON_LAYERS}<h3>Backend</h3><p>APIs in Python and Node with solid test coverage.</p></div>
        <div class="card reveal">{_ICON_ZAP}<h3>DevOps</h3><p>CI pipelines, containers and observability.</p></div>
      </div>
    </div>
  </section>

  <section id="projects" class="projects">
    <div class="container">
      <h2 class="section-title">Selected projects</h2>
      <p class="section-subtitle">A few things I am proud of</p>
      <div class="grid">
        <article class="card project reveal"><span class="tag">SaaS</span><h3>Ledgerly</h3><p>Invoicing platform serving 4,000 small businesses.</p></article>
        <article class="card project reveal"><span class="tag">Open source</span><h3>tiny-queue</h3><p>A 2 KB job queue with 1.2k stars on GitHub.</p></article>
        <article class="card project reveal"><span class="tag">Gov</span><h3>Permit Finder</h3><p>Search tool that cut permit lookup time by 70 percent.</p></article>
      </div>
    </div>
  </section>

  <section id="contact" class="contact">
    <div class="container contact-box">
      <h2 class="section-title">Let us work together</h2>
      <p class="section-subtitle">Available for freelance and contract roles</p>
      <a href="mailto:hello@sara.dev" class="btn btn-primary">hello@sara.dev</a>
    </div>
  </section>

  <footer class="footer">
    <div class="container">
      <p>Sara Haddad, all rights reserved</p>
      <a href="#about">Back to top</a>
    </div>
  </footer>
</body>
</html>""",
    css=_BASE_CSS + """
.intro { min-height: 80vh; display: flex; align-items: center; background: radial-gradient(circle at top right, rgba(99, 102, 241, 0.15), transparent 60%); }
.eyebrow { color: var(--accent); font-weight: 700; text-transform: uppercase; letter-spacing: 0.1em; }
.intro h1 { font-size: 3.2rem; line-height: 1.2; margin: 1rem 0; max-width: 760px; }
.intro p { color: var(--muted); max-width: 620px; }
.intro-actions { display: flex; gap: 1rem; margin-top: 2rem; flex-wrap: wrap; }
.tag { display: inline-block; font-size: 0.8rem; font-weight: 700; color: var(--secondary); background: rgba(139, 92, 246, 0.1); padding: 0.25rem 0.75rem; border-radius: 999px; margin-bottom: 1rem; }
.contact-box { text-align: center; }
@media (max-width: 768px) {
  .intro h1 { font-size: 2.2rem; }
}
""",
    js=_BASE_JS,
)


LANDING_SAAS_TEMPLATE = TemplateBundle(
    id="landing-saas",
    name="SaaS Landing Page",
    name_ar="صفحة هبوط لمنصة خدمات",
    category="landing",
    html=f"""<!DOCTYPE html>
<html lang="ar" dir="rtl">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>منصة سحاب</title>
  <link href="https://fonts.googleapis.com/css2?family=Tajawal:wght@400;500;700;800&display=swap" rel="stylesheet">
</head>
<body>
  <nav class="navbar">
    <div class="container">
      <a href="#hero" class="logo">سحاب</a>
      <ul class="nav-links">
        <li><a href="#features">المميزات</a></li>
        <li><a href="#pricing">الأسعار</a></li>
        <li><a href="#cta">ابدأ الآن</a></li>
      </ul>
      <button class="menu-toggle" aria-label="القائمة">{_ICON_MENU}</button>
    </div>
  </nav>

  <section id="hero" class="hero">
    <div class="container">
      <h1>أدر أعمالك من مكان واحد</h1>
      <p>منصة سحابية متكاملة للفواتير والعملاء والتقارير، مصممة للشركات الناشئة.</p>
      <a href="#pricing" class="btn btn-primary">{_ICON_ZAP} جرب مجانا</a>
    </div>
  </section>

  <section id="features" class="features">
    <div class="container">
      <h2 class="section-title">كل ما تحتاجه للنمو</h2>
      <p class="section-subtitle">أدوات عملية توفر وقت فريقك</p>
      <div class="grid">
        <div class="card reveal">{_ICON_ZAP}<h3>أتمتة ذكية</h3><p>حول المهام المتكررة إلى سير عمل تلقائي.</p></div>
        <div class="card reveal">{_ICON_SHIELD}<h3>أمان متقدم</h3><p>تشفير كامل ونسخ احتياطي يومي.</p></div>
        <div class="card reveal">{_ICON_LAYERS}<h3>تكاملات جاهزة</h3><p>اربط أدواتك المفضلة بنقرة واحدة.</p></div>
      </div>
    </div>
  </section>

  <section id="pricing" class="pricing">
    <div class="container">
      <h2 class="section-title">خطط تناسب الجميع</h2>
      <p class="section-subtitle">ابدأ مجانا وطور خطتك متى شئت</p>
      <div class="grid">
        <div class="card plan reveal"><h3>الأساسية</h3><p class="amount">0 ر.س</p><p>حتى ثلاثة مستخدمين</p></div>
        <div class="card plan featured reveal"><h3>الاحترافية</h3><p class="amount">99 ر.س</p><p>مستخدمون بلا حدود</p></div>
        <div class="card plan reveal"><h3>المؤسسات</h3><p class="amount">حسب الطلب</p><p>دعم مخصص واتفاقية خدمة</p></div>
      </div>
    </div>
  </section>

  <section id="cta" class="cta">
    <div class="container">
      <h2>جاهز للانطلاق؟</h2>
      <a href="#pricing" class="btn btn-primary">أنشئ حسابك</a>
    </div>
  </section>

  <footer class="footer">
    <div class="container">
      <p>جميع الحقوق محفوظة لمنصة سحاب</p>
      <a href="#hero">العودة للأعلى</a>
    </div>
  </footer>
</body>
</html>""",
    css=_BASE_CSS + """
.hero { text-align: center; padding: 8rem 0 6rem; background: var(--gradient); color: #fff; }
.hero h1 { font-size: 3.2rem; margin-bottom: 1rem; }
.hero p { font-size: 1.2rem; opacity: 0.9; margin: 0 auto 2rem; max-width: 640px; }
.hero .btn-primary { background: #fff; color: var(--primary); }
.plan { text-align: center; }
.amount { font-size: 2rem; font-weight: 800; color: var(--primary); margin: 1rem 0; }
.featured { border: 2px solid var(--primary); }
.cta { text-align: center; background: var(--surface); }
.cta h2 { font-size: 2rem; margin-bottom: 1.5rem; }
@media (max-width: 768px) {
  .hero h1 { font-size: 2.1rem; }
}
""",
    js=_BASE_JS,
)


PREMIUM_TEMPLATES: List[TemplateBundle] = [
    ECOMMERCE_TEMPLATE,
    PORTFOLIO_TEMPLATE,
    LANDING_SAAS_TEMPLATE,
]

_ECOMMERCE_KEYWORDS = ("متجر", "تجار", "منتج", "shop", "store", "ecommerce")
_PORTFOLIO_KEYWORDS = ("بورتفوليو", "أعمال", "مطور", "portfolio", "developer", "personal")


def get_template(template_id: str) -> TemplateBundle:
    for template in PREMIUM_TEMPLATES:
        if template.id == template_id:
            return template
    raise KeyError(f"Unknown template: {template_id}")


def find_best_template(prompt: str) -> TemplateBundle:
    """
    Pick a template for a free-text request by keyword.

    Shop/store wording (Arabic or English) selects the e-commerce bundle,
    portfolio/developer wording the portfolio bundle, anything else the
    SaaS landing page.
    """
    prompt_lower = prompt.lower()
    if any(keyword in prompt_lower for keyword in _ECOMMERCE_KEYWORDS):
        return get_template("ecommerce")
    if any(keyword in prompt_lower for keyword in _PORTFOLIO_KEYWORDS):
        return get_template("portfolio")
    return get_template("landing-saas")
